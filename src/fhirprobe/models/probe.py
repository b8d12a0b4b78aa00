# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe arguments and result models."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..capability.tls import TLSVersion
from ..errors import ConfigError
from ..http.client import HttpClient
from ..http.models import HTTP_STATUS_NOT_ATTEMPTED, HTTP_STATUS_TRANSPORT_FAILURE
from ..publisher import MessagePublisher


@dataclass(frozen=True)
class QuerierArgs:
    """Everything one capability query needs, validated once at construction."""

    fhir_url: str
    client: HttpClient
    publisher: MessagePublisher
    queue_name: str

    def __post_init__(self) -> None:
        if not isinstance(self.fhir_url, str) or not self.fhir_url.strip():
            raise ConfigError("fhir_url must be a non-empty string")
        if self.client is None or not callable(getattr(self.client, "request", None)):
            raise ConfigError("client must implement HttpClient.request")
        if self.publisher is None or not callable(getattr(self.publisher, "send", None)):
            raise ConfigError("publisher must implement MessagePublisher.send")
        if not isinstance(self.queue_name, str) or not self.queue_name.strip():
            raise ConfigError("queue_name must be a non-empty string")


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of acquiring one endpoint's capability statement.

    ``error`` may be set alongside partial data: a transport failure on the
    second negotiation pass still leaves the status and TLS details of the
    attempt that failed.
    """

    url: str
    error: str | None = None
    mime_types: tuple[str, ...] = ()
    tls_version: TLSVersion = TLSVersion.UNKNOWN
    http_status: int = HTTP_STATUS_NOT_ATTEMPTED
    capability_statement: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_message(self) -> dict[str, Any]:
        """Queue wire shape."""
        return {
            "url": self.url,
            "err": self.error or "",
            "mimeTypes": list(self.mime_types),
            "tlsVersion": self.tls_version.value,
            "httpResponse": self.http_status,
            "capabilityStatement": self.capability_statement,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_message())

    @classmethod
    def from_message(cls, data: dict[str, Any]) -> ProbeResult:
        """Rebuild a result from a queue message (e.g. on the validation side)."""
        http_status = data.get("httpResponse")
        return cls(
            url=str(data.get("url") or ""),
            error=data.get("err") or None,
            mime_types=tuple(str(m) for m in (data.get("mimeTypes") or []) if isinstance(m, str)),
            tls_version=TLSVersion.classify(data.get("tlsVersion")),
            http_status=http_status if isinstance(http_status, int) else HTTP_STATUS_NOT_ATTEMPTED,
            capability_statement=data.get("capabilityStatement"),
        )


__all__ = [
    "HTTP_STATUS_NOT_ATTEMPTED",
    "HTTP_STATUS_TRANSPORT_FAILURE",
    "ProbeResult",
    "QuerierArgs",
]
