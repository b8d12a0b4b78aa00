# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from fhirprobe.capability import CapabilityStatement, TLSVersion
from fhirprobe.models import RuleName
from fhirprobe.validation import BaseValidation, R4Validation, check_resource_list
from fhirprobe.validation.resources import SearchParamFormatError, search_params_unique


def _statement(**fields):
    document = {"kind": "instance", "fhirVersion": "4.0.1"}
    document.update(fields)
    return CapabilityStatement(document)


def _resources(*types):
    return [{"mode": "server", "resource": [{"type": t} for t in types]}]


@pytest.fixture
def r4():
    return R4Validation()


@pytest.mark.parametrize(
    "tls,valid",
    [
        (TLSVersion.TLS_1_3, True),
        (TLSVersion.TLS_1_2, True),
        (TLSVersion.TLS_1_1, False),
        (TLSVersion.SSL_3_0, False),
        (TLSVersion.NO_TLS, False),
        (TLSVersion.UNKNOWN, False),
    ],
)
def test_tls_rule(r4, tls, valid):
    rule = r4.tls_version(tls)
    assert rule.valid is valid
    assert rule.actual == tls.value
    assert rule.expected == "TLS 1.2, TLS 1.3"
    assert rule.implementation_guide == "USCore 3.1"


def test_mime_type_rule():
    base = BaseValidation()

    ok = base.mime_type_valid(("application/json+fhir", "application/fhir+json"), "4.0.1")
    assert ok.valid
    assert ok.actual == "application/json+fhir,application/fhir+json"
    assert ok.comment == "FHIR Version 4.0.1 requires the Mime Type to be application/fhir+json"

    dstu2 = base.mime_type_valid(("application/fhir+json",), "1.0.2")
    assert not dstu2.valid
    assert dstu2.expected == "application/json+fhir"

    unknown = base.mime_type_valid(("application/fhir+json",), "")
    assert not unknown.valid
    assert unknown.expected == "N/A"
    assert unknown.comment == "Unknown FHIR Version; cannot validate mime type."


@pytest.mark.parametrize("status,valid", [(200, True), (0, True), (404, False), (-1, False)])
def test_http_response_rule(r4, status, valid):
    rule = r4.http_response_valid(status)
    assert rule.valid is valid
    assert rule.actual == str(status)
    if not valid:
        assert rule.comment.startswith(f"The HTTP response code was {status} instead of 200. ")


def test_smart_rule_comment_on_failure(r4):
    assert r4.smart_http_response_valid(0).valid
    assert r4.smart_http_response_valid(200).valid

    failed = r4.smart_http_response_valid(404)
    assert failed.name is RuleName.SMART_HTTP_RESPONSE
    assert not failed.valid
    assert failed.comment.startswith("The HTTP response code was 404 instead of 200. ")
    assert failed.comment.endswith("/.well-known/smart-configuration to their base URL.")


def test_fhir_version_and_kind_rules():
    base = BaseValidation()
    assert base.fhir_version("4.0.1").valid
    assert base.fhir_version("4.0.0").actual == "4.0.0"
    assert not base.fhir_version("4.0.0").valid

    assert base.kind_valid(_statement()).valid
    capability = base.kind_valid(_statement(kind="capability"))
    assert not capability.valid
    assert capability.actual == "capability"
    assert not base.kind_valid(None).valid
    assert base.kind_valid(None).actual == ""


def test_kind_and_instance_rules(r4):
    kind, instance = r4.kind_valid(_statement(implementation={"description": "prod"}))
    assert kind.valid and instance.valid
    assert instance.name is RuleName.INSTANCE

    _kind, missing = r4.kind_valid(_statement())
    assert not missing.valid


def test_patient_and_other_resource_rules(r4):
    statement = _statement(rest=_resources("Patient", "Observation"))
    assert r4.patient_resource_exists(statement).valid
    assert r4.other_resource_exists(statement).valid

    no_patient = r4.patient_resource_exists(_statement(rest=_resources("Observation")))
    assert not no_patient.valid
    assert no_patient.comment == "The US Core Server SHALL support the US Core Patient resource profile."

    only_patient = r4.other_resource_exists(_statement(rest=_resources("Patient", "Binary")))
    assert not only_patient.valid
    assert only_patient.comment.endswith("US Core Profiles. ")


def test_missing_rest_is_reported_on_every_resource_rule(r4):
    statement = _statement()
    for rule in (
        r4.patient_resource_exists(statement),
        r4.other_resource_exists(statement),
        r4.unique_resources(statement),
        r4.search_params_unique(statement),
    ):
        assert not rule.valid
        assert rule.comment.startswith("Rest field does not exist. ")


def test_resource_rules_without_statement(r4):
    rule = r4.unique_resources(None)
    assert not rule.valid
    assert rule.comment.startswith("The Capability Statement does not exist; cannot check resource profiles. ")


def test_malformed_resource_entries(r4):
    statement = _statement(rest=[{"resource": [{"type": 5}]}])
    assert r4.patient_resource_exists(statement).comment.startswith("The Resource Profiles are not properly formatted. ")
    empty = _statement(rest=[{"resource": []}])
    assert r4.patient_resource_exists(empty).comment.startswith("The Resource Profiles do not exist. ")


def test_unique_resources_names_first_duplicate_once(r4):
    rule = r4.unique_resources(_statement(rest=_resources("Patient", "Observation", "Patient", "Patient")))
    assert not rule.valid
    assert rule.comment.count("Patient") == 1
    assert rule.comment.startswith("The resource type Patient is not unique. ")

    assert r4.unique_resources(_statement(rest=_resources("Patient", "Observation"))).valid


def test_search_params_rule_accumulates_findings(r4):
    rest = [
        {
            "resource": [
                {"type": "Patient", "searchParam": [{"name": "name"}, {"name": "name"}]},
                {"type": "Observation", "searchParam": [{"name": "code"}, {"name": "date"}]},
                {"type": "Condition", "searchParam": [{"type": "token"}]},
                {"type": "Encounter"},
            ]
        }
    ]
    rule = r4.search_params_unique(_statement(rest=rest))
    assert not rule.valid
    assert "The resource type Patient does not have unique searchParams. " in rule.comment
    assert "The resource type Condition is not formatted properly. " in rule.comment
    assert "Observation" not in rule.comment
    assert rule.comment.endswith("Search parameter names must be unique in the context of a resource.")


def test_search_params_helper():
    assert search_params_unique({"type": "Patient"})
    assert not search_params_unique({"searchParam": [{"name": "a"}, {"name": "a"}]})
    with pytest.raises(SearchParamFormatError):
        search_params_unique({"searchParam": "a"})
    with pytest.raises(SearchParamFormatError):
        search_params_unique({"searchParam": [{"name": 3}]})


def test_check_resource_list_rejects_other_rules():
    with pytest.raises(ValueError):
        check_resource_list(_statement(), RuleName.KIND, "FHIR Core")


def test_messaging_endpoint_rule(r4):
    ok = r4.messaging_endpoint_valid(_statement(messaging=[{"endpoint": [{"address": "mllp://x"}]}]))
    assert ok.valid

    absent = r4.messaging_endpoint_valid(_statement())
    assert not absent.valid
    assert absent.comment.startswith("Messaging does not exist. ")

    no_endpoint = r4.messaging_endpoint_valid(_statement(messaging=[{"endpoint": []}]))
    assert not no_endpoint.valid
    assert no_endpoint.comment.startswith("Endpoint field in Messaging does not exist. ")

    wrong_kind = r4.messaging_endpoint_valid(_statement(kind="requirements", messaging=[{"endpoint": [{}]}]))
    assert not wrong_kind.valid
    assert wrong_kind.comment.startswith("Kind value should be set to 'instance'")


def test_endpoint_function_rule(r4):
    statement = _statement(rest=_resources("Patient"), document=[{"mode": "producer", "profile": "p"}])
    rule = r4.endpoint_function_valid(statement)
    assert rule.valid
    assert rule.actual == "rest,document"

    missing = r4.endpoint_function_valid(_statement())
    assert not missing.valid
    assert missing.actual == ""


def test_describe_endpoint_rule(r4):
    rule = r4.describe_endpoint_valid(_statement(description="Prod server", software={"name": "srv"}))
    assert rule.valid
    assert rule.actual == "description,software"

    assert not r4.describe_endpoint_valid(_statement(description="")).valid


def test_document_set_rule(r4):
    duplicate = r4.document_set_valid(
        _statement(document=[{"mode": "producer", "profile": "p1"}, {"mode": "producer", "profile": "p1"}])
    )
    assert not duplicate.valid
    assert duplicate.comment.startswith("The set of documents are not unique. ")

    differing_mode = r4.document_set_valid(
        _statement(document=[{"mode": "producer", "profile": "p1"}, {"mode": "consumer", "profile": "p1"}])
    )
    assert differing_mode.valid

    empty = r4.document_set_valid(_statement(document=[]))
    assert empty.valid
    assert empty.comment == "Document field does not exist."

    malformed = r4.document_set_valid(_statement(document=[{"mode": "producer"}]))
    assert not malformed.valid
    assert malformed.comment.startswith("Document field is not formatted correctly.")

    assert r4.document_set_valid(None).valid
