# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""The HttpClient seam between the capability probe and the network."""

from __future__ import annotations

from typing import Protocol

from ..config import HttpSettings
from .models import HttpRequest, HttpResponse


class HttpClient(Protocol):
    """
    Issues one request and reports what came back.

    Implementations return ``HttpResponse(ok=False, ...)`` instead of raising when
    no response was received, and fill ``tls_version`` with the negotiated
    protocol name when the connection was secured.
    """

    def request(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_http_client(settings: HttpSettings | None = None) -> HttpClient:
    """
    Build the httpx-backed client.

    Without explicit ``settings`` the ambient probe context's settings are used,
    falling back to the environment.
    """
    from ..utils.context import get_http_settings
    from .httpx_client import HttpxClient

    return HttpxClient(settings or get_http_settings())
