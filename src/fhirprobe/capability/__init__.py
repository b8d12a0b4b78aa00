# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Capability statement acquisition: MIME/TLS enumerations, fetcher and parser.

The probe orchestrator lives in ``fhirprobe.capability.querier``.
"""

from .fetch import FetchOutcome, fetch_with_content_type
from .mime import MimeType, content_type_is_json
from .statement import (
    CapabilityStatement,
    Field,
    FieldStatus,
    decode_capability_document,
    parse_capability_statement,
)
from .tls import TLSVersion

__all__ = [
    "CapabilityStatement",
    "FetchOutcome",
    "Field",
    "FieldStatus",
    "MimeType",
    "TLSVersion",
    "content_type_is_json",
    "decode_capability_document",
    "fetch_with_content_type",
    "parse_capability_statement",
]
