# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared across probes."""

from __future__ import annotations

METADATA_SUFFIX = "/metadata"
SMART_CONFIGURATION_SUFFIX = "/.well-known/smart-configuration"


def _strip(url: str) -> str:
    return str(url or "").strip().rstrip("/")


def normalize_endpoint_url(url: str) -> str:
    """
    Return the capability statement URL for a FHIR base URL.

    Example:
      https://host/fhir/ -> https://host/fhir/metadata
    """
    base = _strip(url)
    if not base:
        return ""
    if base.endswith(METADATA_SUFFIX):
        return base
    return base + METADATA_SUFFIX


def fhir_base_url(url: str) -> str:
    """Strip a trailing ``/metadata`` segment, leaving the FHIR base URL."""
    base = _strip(url)
    if base.endswith(METADATA_SUFFIX):
        base = base[: -len(METADATA_SUFFIX)]
    return base


def smart_configuration_url(url: str) -> str:
    """Build the SMART well-known configuration URL for a FHIR base or metadata URL."""
    base = fhir_base_url(url)
    if not base:
        return ""
    return base + SMART_CONFIGURATION_SUFFIX


__all__ = [
    "fhir_base_url",
    "normalize_endpoint_url",
    "smart_configuration_url",
]
