# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

import ssl

import pytest

from fhirprobe.capability import (
    CapabilityStatement,
    FieldStatus,
    MimeType,
    TLSVersion,
    content_type_is_json,
    decode_capability_document,
    parse_capability_statement,
)
from fhirprobe.errors import CapabilityParseError


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, TLSVersion.NO_TLS),
        ("TLSv1.3", TLSVersion.TLS_1_3),
        ("TLSv1.2", TLSVersion.TLS_1_2),
        ("TLSv1.1", TLSVersion.TLS_1_1),
        ("TLSv1", TLSVersion.TLS_1_0),
        ("SSLv3", TLSVersion.SSL_3_0),
        ("TLS 1.2", TLSVersion.TLS_1_2),
        ("No TLS", TLSVersion.NO_TLS),
        (ssl.TLSVersion.TLSv1_3, TLSVersion.TLS_1_3),
        ("QUIC-ish", TLSVersion.UNKNOWN),
        (772, TLSVersion.UNKNOWN),
    ],
)
def test_tls_classification_is_total(value, expected):
    assert TLSVersion.classify(value) is expected


def test_only_modern_tls_is_secure():
    assert [v for v in TLSVersion if v.is_secure] == [TLSVersion.TLS_1_2, TLSVersion.TLS_1_3]


def test_expected_mime_type_per_fhir_version():
    assert MimeType.expected_for_fhir_version("1.0.2") is MimeType.FHIR2_LESS_JSON
    assert MimeType.expected_for_fhir_version("0.4.0") is MimeType.FHIR2_LESS_JSON
    assert MimeType.expected_for_fhir_version("3.0.1") is MimeType.FHIR3_PLUS_JSON
    assert MimeType.expected_for_fhir_version("4.0.1") is MimeType.FHIR3_PLUS_JSON
    assert MimeType.expected_for_fhir_version("") is None
    assert MimeType.expected_for_fhir_version(None) is None


def test_content_type_json_detection():
    assert content_type_is_json("application/fhir+json; charset=utf-8")
    assert content_type_is_json("application/json+fhir")
    assert content_type_is_json("application/json")
    assert not content_type_is_json("application/fhir+xml; charset=utf-8")
    assert not content_type_is_json("")
    assert not content_type_is_json(None)


def test_statement_accessors_report_present_malformed_absent():
    statement = CapabilityStatement(
        {
            "kind": "instance",
            "fhirVersion": "4.0.1",
            "description": 12,
            "software": {"name": "srv"},
            "implementation": "not an object",
            "rest": [{"mode": "server", "resource": [{"type": "Patient"}]}],
            "messaging": [{"endpoint": "nope"}],
        }
    )

    assert statement.kind().present and statement.kind().value == "instance"
    assert statement.fhir_version().value == "4.0.1"
    assert statement.description().status is FieldStatus.MALFORMED
    assert statement.software().non_empty()
    assert statement.implementation().malformed
    assert statement.document().absent

    rest = statement.rest()
    assert rest.present
    resources = statement.resource_list(rest.value[0])
    assert [r["type"] for r in resources.value] == ["Patient"]

    messaging = statement.messaging()
    assert messaging.present
    assert statement.messaging_endpoint(messaging.value[0]).malformed


def test_empty_list_is_present_but_not_non_empty():
    statement = CapabilityStatement({"document": []})
    document = statement.document()
    assert document.present
    assert not document.non_empty()


def test_list_with_non_object_entries_is_malformed():
    statement = CapabilityStatement({"rest": [{"mode": "server"}, "x"]})
    assert statement.rest().malformed


def test_parse_capability_statement_inputs():
    assert parse_capability_statement(None) is None
    parsed = parse_capability_statement(b'{"kind": "instance"}')
    assert parsed == CapabilityStatement({"kind": "instance"})
    assert parse_capability_statement({"kind": "capability"}).kind().value == "capability"

    with pytest.raises(CapabilityParseError):
        parse_capability_statement("{not json")
    with pytest.raises(CapabilityParseError):
        parse_capability_statement("[1, 2]")


def test_decode_capability_document_names_source_and_keeps_result():
    assert decode_capability_document("[1]") == [1]
    assert decode_capability_document(b'{"kind": "instance"}') == {"kind": "instance"}

    with pytest.raises(CapabilityParseError) as excinfo:
        decode_capability_document(b"{x", source="https://a.example/metadata", result="partial")

    assert "returned by https://a.example/metadata" in str(excinfo.value)
    assert excinfo.value.result == "partial"


def test_statement_requires_mapping():
    with pytest.raises(TypeError):
        CapabilityStatement(["kind"])  # type: ignore[arg-type]
