# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across fhirprobe."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

Headers = dict[str, str]

# Status sentinels: no request was issued / the request failed before a response.
HTTP_STATUS_NOT_ATTEMPTED = 0
HTTP_STATUS_TRANSPORT_FAILURE = -1


@dataclass(frozen=True)
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    timeout: float | None = None
    # None defers to HttpSettings.allow_redirects.
    allow_redirects: bool | None = None

    def with_header(self, name: str, value: str) -> HttpRequest:
        """Return a copy of the request with one header set (replacing any case variant)."""
        headers = {k: v for k, v in (self.headers or {}).items() if k.lower() != name.lower()}
        headers[name] = value
        return replace(self, headers=headers)


@dataclass
class HttpResponse:
    """
    Normalized HTTP response with the metadata the capability probe needs.

    ``tls_version`` holds the negotiated protocol name reported by the TLS layer
    (e.g. ``"TLSv1.3"``) or None when the connection was not secured.
    """

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    content: bytes = b""
    url: str | None = None
    tls_version: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")
