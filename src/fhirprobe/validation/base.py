# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Validator base classes and the rule set shared by every guide version."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from ..capability.mime import MimeType
from ..capability.statement import CapabilityStatement
from ..capability.tls import TLSVersion
from ..http.models import HTTP_STATUS_NOT_ATTEMPTED as HTTP_NOT_ATTEMPTED
from ..models.report import Rule, RuleName, ValidationReport

HTTP_REFERENCE = "http://hl7.org/fhir/http.html"
CAPABILITY_STATEMENT_REFERENCE = "http://hl7.org/fhir/capabilitystatement.html"
SECURITY_REFERENCE = "http://hl7.org/fhir/security.html"
ONC_CRITERION_REFERENCE = "https://www.healthit.gov/cures/sites/default/files/cures/2020-03/APICertificationCriterion.pdf"

REQUIRED_FHIR_VERSION = "4.0.1"
HTTP_OK = 200


def coerce_statement(value: Any) -> CapabilityStatement | None:
    """Accept a CapabilityStatement, a decoded JSON object, or anything else (treated as missing)."""
    if isinstance(value, CapabilityStatement):
        return value
    if isinstance(value, Mapping):
        return CapabilityStatement(value)
    return None


@dataclass(frozen=True)
class ValidationInput:
    """Everything a rule evaluator may look at for one endpoint."""

    capability_statement: CapabilityStatement | None
    http_status: int
    mime_types: tuple[str, ...]
    fhir_version: str
    tls_version: TLSVersion
    smart_http_status: int = HTTP_NOT_ATTEMPTED

    @classmethod
    def build(
        cls,
        capability_statement: Any,
        http_status: int,
        mime_types: Iterable[str] | None,
        fhir_version: str | None,
        tls_version: TLSVersion | str | None,
        smart_http_status: int = HTTP_NOT_ATTEMPTED,
    ) -> ValidationInput:
        return cls(
            capability_statement=coerce_statement(capability_statement),
            http_status=int(http_status),
            mime_types=tuple(mime_types or ()),
            fhir_version=str(fhir_version or ""),
            tls_version=TLSVersion.classify(tls_version),
            smart_http_status=int(smart_http_status),
        )


Evaluator = Callable[[ValidationInput], Union[Rule, Sequence[Rule]]]


class Validator(ABC):
    """
    Evaluates a capability statement against one implementation guide version.

    Subclasses declare their evaluators in order; ``run_validation`` runs every
    one of them without short-circuiting, so a report always lists each rule.
    """

    implementation_guide: str = ""

    @abstractmethod
    def evaluators(self) -> Sequence[Evaluator]: ...

    def run_validation(self, inputs: ValidationInput) -> ValidationReport:
        results: list[Rule] = []
        for evaluator in self.evaluators():
            outcome = evaluator(inputs)
            if isinstance(outcome, Rule):
                results.append(outcome)
            else:
                results.extend(outcome)
        return ValidationReport(results=tuple(results), warnings=())

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"{self.__class__.__name__}(implementation_guide={self.implementation_guide!r})"


class BaseValidation(Validator):
    """Rules that apply to any FHIR server, whatever guide it claims."""

    implementation_guide = "FHIR Core"

    def evaluators(self) -> Sequence[Evaluator]:
        return (
            lambda inp: self.cap_stat_exists(inp.capability_statement),
            lambda inp: self.mime_type_valid(inp.mime_types, inp.fhir_version),
            lambda inp: self.http_response_valid(inp.http_status),
            lambda inp: self.fhir_version(inp.fhir_version),
            lambda inp: self.tls_version(inp.tls_version),
            lambda inp: self.kind_valid(inp.capability_statement),
        )

    def _rule(self, name: RuleName, **fields: Any) -> Rule:
        fields.setdefault("implementation_guide", self.implementation_guide)
        return Rule(name=name, **fields)

    def cap_stat_exists(self, capability_statement: CapabilityStatement | None) -> Rule:
        rule = self._rule(
            RuleName.CAP_STAT_EXISTS,
            expected="true",
            actual="true",
            comment="Servers SHALL provide a Capability Statement that specifies which interactions and resources are supported.",
            reference=HTTP_REFERENCE,
        )
        if capability_statement is None:
            return rule.failed()
        return rule

    def mime_type_valid(self, mime_types: Sequence[str], fhir_version: str) -> Rule:
        expected = MimeType.expected_for_fhir_version(fhir_version)
        actual = ",".join(mime_types)
        if expected is None:
            return self._rule(
                RuleName.MIME_TYPE,
                valid=False,
                expected="N/A",
                actual=actual,
                comment="Unknown FHIR Version; cannot validate mime type.",
                reference=HTTP_REFERENCE,
            )
        rule = self._rule(
            RuleName.MIME_TYPE,
            expected=expected.value,
            actual=actual,
            comment=f"FHIR Version {fhir_version} requires the Mime Type to be {expected.value}",
            reference=HTTP_REFERENCE,
        )
        if expected.value not in mime_types:
            return rule.failed(actual=actual)
        return rule

    def http_response_valid(self, http_status: int) -> Rule:
        rule = self._rule(
            RuleName.HTTP_RESPONSE,
            expected=str(HTTP_OK),
            actual=str(http_status),
            comment="Applications SHALL return a resource that describes the functionality of the server end-point.",
            reference=HTTP_REFERENCE,
        )
        # 0 means the request was never made; only a real non-200 answer fails.
        if http_status not in (HTTP_NOT_ATTEMPTED, HTTP_OK):
            return rule.failed(actual=str(http_status))
        return rule

    def fhir_version(self, fhir_version: str) -> Rule:
        rule = self._rule(
            RuleName.FHIR_VERSION,
            expected=REQUIRED_FHIR_VERSION,
            actual=fhir_version,
            comment=f"ONC Certification Criteria requires support of FHIR Version {REQUIRED_FHIR_VERSION}",
            reference=ONC_CRITERION_REFERENCE,
        )
        if fhir_version != REQUIRED_FHIR_VERSION:
            return rule.failed(actual=fhir_version)
        return rule

    def tls_version(self, tls_version: TLSVersion) -> Rule:
        rule = self._rule(
            RuleName.TLS_VERSION,
            expected=f"{TLSVersion.TLS_1_2.value}, {TLSVersion.TLS_1_3.value}",
            actual=tls_version.value,
            comment="Systems SHALL use TLS version 1.2 or higher for all transmissions not taking place over a secure network connection.",
            reference=SECURITY_REFERENCE,
        )
        if not tls_version.is_secure:
            return rule.failed(actual=tls_version.value)
        return rule

    def kind_valid(self, capability_statement: CapabilityStatement | None) -> Rule:
        kind = capability_statement.kind() if capability_statement is not None else None
        actual = kind.value if kind is not None and kind.present else ""
        rule = self._rule(
            RuleName.KIND,
            expected="instance",
            actual=actual,
            comment="Kind value should be set to 'instance' because this is a specific system instance.",
            reference=CAPABILITY_STATEMENT_REFERENCE,
        )
        if actual != "instance":
            return rule.failed(actual=actual)
        return rule


__all__ = [
    "BaseValidation",
    "Evaluator",
    "ValidationInput",
    "Validator",
    "coerce_statement",
]
