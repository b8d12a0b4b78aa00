# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
fhirprobe package entrypoint.

This package probes FHIR servers for their capability statement (content
negotiation, TLS version, document acquisition) and validates the statement
against per-implementation-guide rule sets. HTTP behavior is abstracted behind an
injectable client interface, and domain objects are modeled with typed
dataclasses for clarity.
"""

from .capability import CapabilityStatement, MimeType, TLSVersion, parse_capability_statement
from .capability.querier import (
    get_and_send_capability_statement,
    request_capability_statement,
    request_smart_configuration_status,
)
from .config import HttpSettings, load_http_settings
from .errors import CapabilityParseError, ConfigError, FhirProbeError, PublishError
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    create_default_http_client,
)
from .log import setup_logging
from .models import Assessment, ProbeResult, QuerierArgs, Rule, RuleName, ValidationReport
from .publisher import MessagePublisher
from .runtime import FhirProbe
from .utils.context import probe_context
from .validation import register_validator, run_validation, validate_probe_result
from .version import __version__

__all__ = [
    "Assessment",
    "CapabilityParseError",
    "CapabilityStatement",
    "ConfigError",
    "FhirProbe",
    "FhirProbeError",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "MessagePublisher",
    "MimeType",
    "ProbeResult",
    "PublishError",
    "QuerierArgs",
    "Rule",
    "RuleName",
    "TLSVersion",
    "ValidationReport",
    "create_default_http_client",
    "get_and_send_capability_statement",
    "load_http_settings",
    "parse_capability_statement",
    "probe_context",
    "register_validator",
    "request_capability_statement",
    "request_smart_configuration_status",
    "run_validation",
    "setup_logging",
    "validate_probe_result",
    "__version__",
]
