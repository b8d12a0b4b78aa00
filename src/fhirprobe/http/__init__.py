# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubHttpClient
from .client import HttpClient, create_default_http_client
from .headers import header_value
from .httpx_client import HttpxClient, negotiated_tls_version
from .models import Headers, HttpRequest, HttpResponse
from .url import fhir_base_url, normalize_endpoint_url, smart_configuration_url

__all__ = [
    "Headers",
    "HttpClient",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "StubHttpClient",
    "create_default_http_client",
    "fhir_base_url",
    "header_value",
    "negotiated_tls_version",
    "normalize_endpoint_url",
    "smart_configuration_url",
]
