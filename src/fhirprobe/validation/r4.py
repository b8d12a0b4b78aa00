# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""FHIR R4 rules for the US Core 3.1 implementation guide."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..capability.statement import CapabilityStatement
from ..capability.tls import TLSVersion
from ..models.report import Rule, RuleName
from .base import (
    CAPABILITY_STATEMENT_REFERENCE,
    HTTP_NOT_ATTEMPTED,
    HTTP_OK,
    HTTP_REFERENCE,
    BaseValidation,
    Evaluator,
    Validator,
)
from .resources import check_resource_list

US_CORE_GUIDE = "USCore 3.1"
US_CORE_SERVER_REFERENCE = "https://www.hl7.org/fhir/us/core/CapabilityStatement-us-core-server.html"
US_CORE_SECURITY_REFERENCE = "https://www.hl7.org/fhir/us/core/security.html"
SMART_REFERENCE = "http://www.hl7.org/fhir/smart-app-launch/conformance/index.html"

DOCUMENT_SEPARATOR = "."


def _status_comment(http_status: int, suffix: str) -> str:
    return f"The HTTP response code was {http_status} instead of {HTTP_OK}. {suffix}"


class R4Validation(Validator):
    """
    US Core 3.1 rule set.

    Shares the base rules by delegating to a BaseValidation and rewriting the
    guide tag, reference and comment text where US Core says something more
    specific.
    """

    implementation_guide = US_CORE_GUIDE

    def __init__(self, base: BaseValidation | None = None):
        self.base = base or BaseValidation()

    def evaluators(self) -> Sequence[Evaluator]:
        return (
            lambda inp: self.cap_stat_exists(inp.capability_statement),
            lambda inp: self.mime_type_valid(inp.mime_types, inp.fhir_version),
            lambda inp: self.http_response_valid(inp.http_status),
            lambda inp: self.fhir_version(inp.fhir_version),
            lambda inp: self.tls_version(inp.tls_version),
            lambda inp: self.patient_resource_exists(inp.capability_statement),
            lambda inp: self.other_resource_exists(inp.capability_statement),
            lambda inp: self.smart_http_response_valid(inp.smart_http_status),
            lambda inp: self.kind_valid(inp.capability_statement),
            lambda inp: self.messaging_endpoint_valid(inp.capability_statement),
            lambda inp: self.endpoint_function_valid(inp.capability_statement),
            lambda inp: self.describe_endpoint_valid(inp.capability_statement),
            lambda inp: self.document_set_valid(inp.capability_statement),
            lambda inp: self.unique_resources(inp.capability_statement),
            lambda inp: self.search_params_unique(inp.capability_statement),
        )

    def _rule(self, name: RuleName, **fields: Any) -> Rule:
        return Rule(name=name, implementation_guide=self.implementation_guide, **fields)

    def _resource_rule(
        self,
        capability_statement: CapabilityStatement | None,
        name: RuleName,
        base_comment: str,
        reference: str,
    ) -> Rule:
        rule = check_resource_list(capability_statement, name, self.implementation_guide)
        return rule.with_updates(comment=rule.comment + base_comment, reference=reference)

    def cap_stat_exists(self, capability_statement: CapabilityStatement | None) -> Rule:
        return self.base.cap_stat_exists(capability_statement).with_updates(
            reference=HTTP_REFERENCE,
            implementation_guide=self.implementation_guide,
        )

    def mime_type_valid(self, mime_types: Sequence[str], fhir_version: str) -> Rule:
        return self.base.mime_type_valid(mime_types, fhir_version).with_updates(
            reference=HTTP_REFERENCE,
            implementation_guide=self.implementation_guide,
        )

    def http_response_valid(self, http_status: int) -> Rule:
        rule = self.base.http_response_valid(http_status).with_updates(
            reference=HTTP_REFERENCE,
            implementation_guide=self.implementation_guide,
        )
        if not rule.valid:
            rule = rule.with_updates(
                comment=_status_comment(
                    http_status,
                    "Applications SHALL return a resource that describes the functionality of the server end-point.",
                )
            )
        return rule

    def fhir_version(self, fhir_version: str) -> Rule:
        return self.base.fhir_version(fhir_version).with_updates(implementation_guide=self.implementation_guide)

    def tls_version(self, tls_version: TLSVersion) -> Rule:
        return self.base.tls_version(tls_version).with_updates(
            reference=US_CORE_SECURITY_REFERENCE,
            implementation_guide=self.implementation_guide,
        )

    def patient_resource_exists(self, capability_statement: CapabilityStatement | None) -> Rule:
        return self._resource_rule(
            capability_statement,
            RuleName.PATIENT_RESOURCE_EXISTS,
            "The US Core Server SHALL support the US Core Patient resource profile.",
            US_CORE_SERVER_REFERENCE,
        )

    def other_resource_exists(self, capability_statement: CapabilityStatement | None) -> Rule:
        return self._resource_rule(
            capability_statement,
            RuleName.OTHER_RESOURCE_EXISTS,
            "The US Core Server SHALL support at least one additional resource profile (besides Patient) from the list of US Core Profiles. ",
            US_CORE_SERVER_REFERENCE,
        )

    def smart_http_response_valid(self, smart_http_status: int) -> Rule:
        base_comment = (
            "FHIR endpoints requiring authorization SHALL serve a JSON document at the location formed by "
            "appending /.well-known/smart-configuration to their base URL."
        )
        rule = self.base.http_response_valid(smart_http_status).with_updates(
            name=RuleName.SMART_HTTP_RESPONSE,
            comment=base_comment,
            reference=SMART_REFERENCE,
            implementation_guide=self.implementation_guide,
        )
        if smart_http_status not in (HTTP_NOT_ATTEMPTED, HTTP_OK):
            rule = rule.with_updates(
                comment=_status_comment(
                    smart_http_status,
                    "Applications SHALL return a resource that describes the functionality of the server end-point. " + base_comment,
                )
            )
        return rule

    def kind_valid(self, capability_statement: CapabilityStatement | None) -> tuple[Rule, Rule]:
        """Kind rule plus the instance rule: a kind=instance statement must carry ``implementation``."""
        kind_rule = self.base.kind_valid(capability_statement).with_updates(
            reference=CAPABILITY_STATEMENT_REFERENCE,
            implementation_guide=self.implementation_guide,
        )
        instance_rule = self._rule(
            RuleName.INSTANCE,
            expected="true",
            actual="true",
            comment="If kind = instance, implementation must be present. This endpoint must be an instance.",
            reference=CAPABILITY_STATEMENT_REFERENCE,
        )
        implementation = capability_statement.implementation() if capability_statement is not None else None
        if implementation is None or not implementation.non_empty():
            instance_rule = instance_rule.failed()
        return kind_rule, instance_rule

    def messaging_endpoint_valid(self, capability_statement: CapabilityStatement | None) -> Rule:
        """Messaging end-point is required (and only permitted) when the statement is for an implementation."""
        base_comment = (
            "Messaging end-point is required (and is only permitted) when a statement is for an implementation. "
            "This endpoint must be an implementation."
        )
        rule = self._rule(
            RuleName.MESSAGING_ENDPOINT,
            expected="true",
            actual="true",
            comment=base_comment,
            reference=CAPABILITY_STATEMENT_REFERENCE,
        )

        kind_rule = self.base.kind_valid(capability_statement)
        if not kind_rule.valid or capability_statement is None:
            return rule.failed(kind_rule.comment + " " + base_comment)

        messaging = capability_statement.messaging()
        if not messaging.present:
            return rule.failed("Messaging does not exist. " + base_comment)
        for entry in messaging.value or []:
            if not capability_statement.messaging_endpoint(entry).non_empty():
                return rule.failed("Endpoint field in Messaging does not exist. " + base_comment)
        return rule

    def endpoint_function_valid(self, capability_statement: CapabilityStatement | None) -> Rule:
        """A Capability Statement SHALL have at least one of REST, messaging or document element."""
        rule = self._rule(
            RuleName.ENDPOINT_FUNCTION,
            expected="rest OR messaging OR document",
            comment="A Capability Statement SHALL have at least one of REST, messaging or document element.",
            reference=CAPABILITY_STATEMENT_REFERENCE,
        )
        found: list[str] = []
        if capability_statement is not None:
            if capability_statement.rest().non_empty():
                found.append("rest")
            if capability_statement.messaging().non_empty():
                found.append("messaging")
            if capability_statement.document().non_empty():
                found.append("document")
        if not found:
            return rule.failed(actual="")
        return rule.with_updates(actual=",".join(found))

    def describe_endpoint_valid(self, capability_statement: CapabilityStatement | None) -> Rule:
        """A Capability Statement SHALL have at least one of description, software, or implementation element."""
        rule = self._rule(
            RuleName.DESCRIBE_ENDPOINT,
            expected="description OR software OR implementation",
            comment="A Capability Statement SHALL have at least one of description, software, or implementation element.",
            reference=CAPABILITY_STATEMENT_REFERENCE,
        )
        found: list[str] = []
        if capability_statement is not None:
            if capability_statement.description().non_empty():
                found.append("description")
            if capability_statement.software().non_empty():
                found.append("software")
            if capability_statement.implementation().non_empty():
                found.append("implementation")
        if not found:
            return rule.failed(actual="")
        return rule.with_updates(actual=",".join(found))

    def document_set_valid(self, capability_statement: CapabilityStatement | None) -> Rule:
        """The set of documents must be unique by the combination of profile and mode."""
        base_comment = "The set of documents must be unique by the combination of profile and mode."
        malformed_comment = "Document field is not formatted correctly. Cannot check if the set of documents are unique. "
        rule = self._rule(
            RuleName.DOCUMENT_SET,
            expected="true",
            actual="true",
            comment=base_comment,
            reference=CAPABILITY_STATEMENT_REFERENCE,
        )

        document = capability_statement.document() if capability_statement is not None else None
        if document is not None and document.malformed:
            return rule.failed(malformed_comment + base_comment)
        if document is None or not document.non_empty():
            # No documents is not a violation.
            return rule.with_updates(comment="Document field does not exist.")

        seen: set[str] = set()
        for entry in document.value or []:
            mode = entry.get("mode")
            profile = entry.get("profile")
            if not isinstance(mode, str) or not isinstance(profile, str):
                return rule.failed(malformed_comment + base_comment)
            key = profile + DOCUMENT_SEPARATOR + mode
            if key in seen:
                return rule.failed("The set of documents are not unique. " + base_comment)
            seen.add(key)
        return rule

    def unique_resources(self, capability_statement: CapabilityStatement | None) -> Rule:
        """A given resource can only be described once per RESTful mode."""
        return self._resource_rule(
            capability_statement,
            RuleName.UNIQUE_RESOURCES,
            "A given resource can only be described once per RESTful mode.",
            CAPABILITY_STATEMENT_REFERENCE,
        )

    def search_params_unique(self, capability_statement: CapabilityStatement | None) -> Rule:
        """Search parameter names must be unique in the context of a resource."""
        return self._resource_rule(
            capability_statement,
            RuleName.SEARCH_PARAMS_UNIQUE,
            "Search parameter names must be unique in the context of a resource.",
            CAPABILITY_STATEMENT_REFERENCE,
        )


__all__ = ["R4Validation", "US_CORE_GUIDE"]
