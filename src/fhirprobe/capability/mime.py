# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""FHIR JSON MIME types used during content negotiation."""

from __future__ import annotations

from enum import Enum

# Releases before STU3 (DSTU2 and its ballots) use the legacy JSON type.
DSTU2_VERSIONS = frozenset({"0.4.0", "0.5.0", "1.0.0", "1.0.1", "1.0.2"})


class MimeType(str, Enum):
    FHIR3_PLUS_JSON = "application/fhir+json"
    FHIR2_LESS_JSON = "application/json+fhir"

    @classmethod
    def expected_for_fhir_version(cls, fhir_version: str | None) -> MimeType | None:
        """Return the JSON MIME type a server of ``fhir_version`` must support, None if unknown."""
        version = (fhir_version or "").strip()
        if not version:
            return None
        if version in DSTU2_VERSIONS:
            return cls.FHIR2_LESS_JSON
        return cls.FHIR3_PLUS_JSON


def content_type_is_json(content_type: str | None) -> bool:
    """
    True when any ``"; "``-separated part of a Content-Type mentions JSON.

    Servers tend to answer with whichever JSON flavour they saw first, so the
    exact requested type is not required.
    """
    if not content_type:
        return False
    return any("json" in part for part in content_type.split("; "))


__all__ = ["DSTU2_VERSIONS", "MimeType", "content_type_is_json"]
