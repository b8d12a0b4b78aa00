# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for fhirprobe."""

from ..http.models import Headers, HttpRequest, HttpResponse
from .probe import HTTP_STATUS_NOT_ATTEMPTED, HTTP_STATUS_TRANSPORT_FAILURE, ProbeResult, QuerierArgs
from .report import Assessment, Rule, RuleName, ValidationReport

__all__ = [
    "Assessment",
    "HTTP_STATUS_NOT_ATTEMPTED",
    "HTTP_STATUS_TRANSPORT_FAILURE",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "ProbeResult",
    "QuerierArgs",
    "Rule",
    "RuleName",
    "ValidationReport",
]
