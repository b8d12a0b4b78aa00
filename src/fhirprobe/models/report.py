# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclasses for validation rules and reports."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .probe import ProbeResult


class RuleName(str, Enum):
    CAP_STAT_EXISTS = "capStatExist"
    MIME_TYPE = "generalMimeType"
    HTTP_RESPONSE = "httpResponse"
    FHIR_VERSION = "fhirVersion"
    TLS_VERSION = "tlsVersion"
    PATIENT_RESOURCE_EXISTS = "patResourceExists"
    OTHER_RESOURCE_EXISTS = "otherResourceExists"
    SMART_HTTP_RESPONSE = "smartHttpRespRule"
    KIND = "kindRule"
    INSTANCE = "instanceRule"
    MESSAGING_ENDPOINT = "messagingEndptRule"
    ENDPOINT_FUNCTION = "endptFunctionRule"
    DESCRIBE_ENDPOINT = "describeEndptRule"
    DOCUMENT_SET = "documentValidRule"
    UNIQUE_RESOURCES = "uniqueResourcesRule"
    SEARCH_PARAMS_UNIQUE = "searchParamsRule"


@dataclass(frozen=True)
class Rule:
    """One evaluated normative statement."""

    name: RuleName
    valid: bool = True
    expected: str = ""
    actual: str = ""
    comment: str = ""
    reference: str = ""
    implementation_guide: str = ""

    def with_updates(self, **changes: Any) -> Rule:
        """Return a copy with selected fields replaced."""
        return replace(self, **changes)

    def failed(self, comment: str | None = None, actual: str = "false") -> Rule:
        """Return a failing copy, optionally replacing the comment."""
        changes: dict[str, Any] = {"valid": False, "actual": actual}
        if comment is not None:
            changes["comment"] = comment
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleName": self.name.value,
            "valid": self.valid,
            "expected": self.expected,
            "actual": self.actual,
            "comment": self.comment,
            "reference": self.reference,
            "implementationGuide": self.implementation_guide,
        }

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Rule:
        return cls(
            name=RuleName(data["ruleName"]),
            valid=bool(data.get("valid")),
            expected=str(data.get("expected") or ""),
            actual=str(data.get("actual") or ""),
            comment=str(data.get("comment") or ""),
            reference=str(data.get("reference") or ""),
            implementation_guide=str(data.get("implementationGuide") or ""),
        )


@dataclass(frozen=True)
class ValidationReport:
    """Ordered rule results plus advisory warnings."""

    results: tuple[Rule, ...] = ()
    warnings: tuple[Rule, ...] = ()

    @property
    def passed(self) -> bool:
        return all(rule.valid for rule in self.results)

    def failures(self) -> list[Rule]:
        return [rule for rule in self.results if not rule.valid]

    def get(self, name: RuleName) -> list[Rule]:
        """All results carrying ``name``, in report order."""
        return [rule for rule in self.results if rule.name is name]

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [rule.to_dict() for rule in self.results],
            "warnings": [rule.to_dict() for rule in self.warnings],
        }


@dataclass(frozen=True)
class Assessment:
    """A probe result together with the validation report derived from it."""

    probe: ProbeResult
    validation: ValidationReport
    smart_http_status: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "probe": self.probe.to_message(),
            "smartHttpResponse": self.smart_http_status,
            "validation": self.validation.to_dict(),
        }
