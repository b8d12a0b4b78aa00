# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum
from typing import Any

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class FhirProbeError(Exception):
    """Base class for errors raised by fhirprobe."""


class ConfigError(FhirProbeError, ValueError):
    """Probe arguments failed validation at the orchestration boundary."""


class ProbeCancelledError(FhirProbeError):
    """The ambient probe context was cancelled or its deadline passed."""


class CapabilityParseError(FhirProbeError):
    """
    A response advertised a JSON content type but its body was not a JSON object.

    The partially populated probe result is kept on ``result`` so callers can still
    publish status, TLS and MIME information.
    """

    def __init__(self, message: str, *, result: Any = None):
        super().__init__(message)
        self.result = result


class PublishError(FhirProbeError):
    """Handing the finished message to the queue collaborator failed."""


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, ProbeCancelledError):
        return ErrorCategory.CANCELLED

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, httpx.ConnectError):
        # httpx wraps resolver and handshake failures in ConnectError; inspect the cause.
        cause = exc.__cause__ or exc.__context__
        if cause is not None and cause is not exc:
            inner = categorize_exception(cause)
            if inner in (ErrorCategory.SSL_ERROR, ErrorCategory.DNS_ERROR):
                return inner
        text = str(exc).lower()
        if "certificate" in text or "ssl" in text or "tls" in text:
            return ErrorCategory.SSL_ERROR
        if "name or service not known" in text or "nodename nor servname" in text or "getaddrinfo" in text:
            return ErrorCategory.DNS_ERROR
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


__all__ = [
    "CapabilityParseError",
    "ConfigError",
    "ErrorCategory",
    "FhirProbeError",
    "ProbeCancelledError",
    "PublishError",
    "categorize_exception",
]
