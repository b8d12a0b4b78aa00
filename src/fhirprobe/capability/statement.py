# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Capability statement parsing.

A capability statement is loosely shaped JSON: any field may be missing or carry
the wrong type. ``CapabilityStatement`` never raises on such documents; each
accessor returns a ``Field`` tagged PRESENT, MALFORMED or ABSENT so rule
evaluators branch on an explicit outcome.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from ..errors import CapabilityParseError

T = TypeVar("T")

JsonObject = dict[str, Any]


class FieldStatus(str, Enum):
    PRESENT = "present"
    MALFORMED = "malformed"
    ABSENT = "absent"


@dataclass(frozen=True)
class Field(Generic[T]):
    status: FieldStatus
    value: T | None = None

    @property
    def present(self) -> bool:
        return self.status is FieldStatus.PRESENT

    @property
    def malformed(self) -> bool:
        return self.status is FieldStatus.MALFORMED

    @property
    def absent(self) -> bool:
        return self.status is FieldStatus.ABSENT

    def non_empty(self) -> bool:
        """PRESENT with a value that has at least one element/character."""
        return self.present and bool(self.value)


_ABSENT: Field[Any] = Field(FieldStatus.ABSENT)
_MALFORMED: Field[Any] = Field(FieldStatus.MALFORMED)


def _object_list(container: Mapping[str, Any], key: str) -> Field[list[JsonObject]]:
    raw = container.get(key)
    if raw is None:
        return _ABSENT
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        return _MALFORMED
    return Field(FieldStatus.PRESENT, list(raw))


def _object(container: Mapping[str, Any], key: str) -> Field[JsonObject]:
    raw = container.get(key)
    if raw is None:
        return _ABSENT
    if not isinstance(raw, dict):
        return _MALFORMED
    return Field(FieldStatus.PRESENT, raw)


def _string(container: Mapping[str, Any], key: str) -> Field[str]:
    raw = container.get(key)
    if raw is None:
        return _ABSENT
    if not isinstance(raw, str):
        return _MALFORMED
    return Field(FieldStatus.PRESENT, raw)


class CapabilityStatement:
    """Read-only view over a parsed capability statement document."""

    def __init__(self, document: Mapping[str, Any]):
        if not isinstance(document, Mapping):
            raise TypeError("capability statement must be a JSON object")
        self._document = document

    @property
    def raw(self) -> Mapping[str, Any]:
        return self._document

    def rest(self) -> Field[list[JsonObject]]:
        return _object_list(self._document, "rest")

    def resource_list(self, rest_entry: Mapping[str, Any]) -> Field[list[JsonObject]]:
        return _object_list(rest_entry, "resource")

    def messaging(self) -> Field[list[JsonObject]]:
        return _object_list(self._document, "messaging")

    def messaging_endpoint(self, messaging_entry: Mapping[str, Any]) -> Field[list[JsonObject]]:
        return _object_list(messaging_entry, "endpoint")

    def document(self) -> Field[list[JsonObject]]:
        return _object_list(self._document, "document")

    def implementation(self) -> Field[JsonObject]:
        return _object(self._document, "implementation")

    def software(self) -> Field[JsonObject]:
        return _object(self._document, "software")

    def description(self) -> Field[str]:
        return _string(self._document, "description")

    def kind(self) -> Field[str]:
        return _string(self._document, "kind")

    def fhir_version(self) -> Field[str]:
        return _string(self._document, "fhirVersion")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CapabilityStatement):
            return NotImplemented
        return self._document == other._document

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        version = self.fhir_version()
        return f"CapabilityStatement(fhirVersion={version.value!r})"


def decode_capability_document(data: bytes | bytearray | str, *, source: str = "", result: Any = None) -> Any:
    """
    Decode a capability statement body into its JSON value.

    Raises CapabilityParseError naming ``source`` and carrying ``result`` (the
    partially built probe result, if any) when the body is not valid JSON.
    """
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        where = f" returned by {source}" if source else ""
        raise CapabilityParseError(f"unable to parse the capability statement{where}: {exc}", result=result) from exc


def parse_capability_statement(data: bytes | str | Mapping[str, Any] | None) -> CapabilityStatement | None:
    """
    Build a CapabilityStatement from a raw body or an already decoded document.

    Returns None for None. Raises CapabilityParseError when the body is not
    JSON or its top level is not an object.
    """
    if data is None:
        return None
    if isinstance(data, CapabilityStatement):
        return data
    if isinstance(data, (bytes, bytearray, str)):
        document = decode_capability_document(data)
    else:
        document = data
    if not isinstance(document, Mapping):
        raise CapabilityParseError(
            f"capability statement must be a JSON object, got {type(document).__name__}"
        )
    return CapabilityStatement(document)


__all__ = [
    "CapabilityStatement",
    "Field",
    "FieldStatus",
    "JsonObject",
    "decode_capability_document",
    "parse_capability_statement",
]
