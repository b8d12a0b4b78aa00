# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Content-negotiated fetch of a capability statement."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ..errors import ProbeCancelledError
from ..http.client import HttpClient
from ..http.headers import header_value
from ..http.models import HTTP_STATUS_TRANSPORT_FAILURE, HttpRequest
from ..utils.context import get_probe_context
from .mime import MimeType, content_type_is_json
from .tls import TLSVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchOutcome:
    """Raw outcome of one negotiated request."""

    http_status: int
    tls_version: TLSVersion
    mime_matched: bool = False
    body: bytes | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _transport_failure(message: str) -> FetchOutcome:
    return FetchOutcome(
        http_status=HTTP_STATUS_TRANSPORT_FAILURE,
        tls_version=TLSVersion.UNKNOWN,
        error=message,
    )


def bounded_request(request: HttpRequest) -> HttpRequest:
    """Apply the ambient deadline to the request timeout, raising if it has already passed."""
    context = get_probe_context()
    context.check()
    remaining = context.remaining()
    if remaining is None:
        return request
    timeout = remaining if request.timeout is None else min(request.timeout, remaining)
    return replace(request, timeout=timeout)


def fetch_with_content_type(request: HttpRequest, mime_type: MimeType, client: HttpClient) -> FetchOutcome:
    """
    Send ``request`` with ``Accept: mime_type`` and report status, TLS and match.

    A non-200 status is data, not an error. ``error`` is set only when no
    response was received (connection, DNS, TLS handshake, timeout, or a
    cancelled/expired probe context) or a matched JSON body was cut off at the
    client's size limit.
    """
    negotiated = request.with_header("Accept", mime_type.value)
    try:
        negotiated = bounded_request(negotiated)
    except ProbeCancelledError as exc:
        return _transport_failure(f"making the GET request to {request.url} failed: {exc}")

    response = client.request(negotiated)
    if not response.ok or response.status_code is None:
        reason = response.error_message or response.error_type or "no response received"
        logger.debug("Request to %s with Accept %s failed: %s", request.url, mime_type.value, reason)
        return _transport_failure(f"making the GET request to {request.url} failed: {reason}")

    tls_version = TLSVersion.classify(response.tls_version)
    status = response.status_code
    if status != 200:
        return FetchOutcome(http_status=status, tls_version=tls_version)

    # Servers default to XML; any JSON flavour shows the JSON request was honoured,
    # even when it is not the exact type asked for.
    content_type = header_value(response.headers, "Content-Type")
    if not content_type_is_json(content_type):
        logger.debug("%s answered Accept %s with Content-Type %r", request.url, mime_type.value, content_type)
        return FetchOutcome(http_status=status, tls_version=tls_version)

    if response.meta.get("body_truncated"):
        limit = response.meta.get("body_bytes_limit")
        return _transport_failure(
            f"reading the response from {request.url} failed: body exceeds the {limit} byte limit"
        )

    return FetchOutcome(
        http_status=status,
        tls_version=tls_version,
        mime_matched=True,
        body=response.content,
    )


__all__ = ["FetchOutcome", "bounded_request", "fetch_with_content_type"]
