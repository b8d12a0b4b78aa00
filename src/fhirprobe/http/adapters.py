# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Test doubles implementing the HttpClient protocol."""

from __future__ import annotations

from .client import HttpClient
from .headers import header_value
from .models import HttpRequest, HttpResponse


class StubHttpClient(HttpClient):
    """
    Deterministic, programmable HttpClient for tests.

    Responses are keyed by URL, optionally narrowed by the request's ``Accept``
    header so content negotiation can be scripted per MIME type.
    """

    def __init__(self, responses: dict[str, HttpResponse] | None = None):
        self._responses: dict[tuple[str, str | None], HttpResponse] = {}
        for url, response in (responses or {}).items():
            self.add(url, response)
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse, *, accept: str | None = None) -> None:
        self._responses[(url, accept)] = response

    def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        accept = header_value(request.headers, "Accept") or None
        for key in ((request.url, accept), (request.url, None)):
            if key in self._responses:
                return self._responses[key]
        return HttpResponse(ok=False, status_code=None, error_message="No stubbed response configured")

    def close(self) -> None:
        self.closed = True
