# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from ..config import DEFAULT_MAX_BODY_BYTES, HttpSettings, load_http_settings
from ..errors import categorize_exception
from ..utils.context import get_probe_context
from .client import HttpClient
from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


def negotiated_tls_version(response: httpx.Response) -> str | None:
    """
    Return the TLS protocol name of the connection that served ``response``.

    Only available while the response stream is open. None means the
    connection carried no TLS state (plain HTTP, or a transport without a
    network stream such as ``httpx.MockTransport``).
    """
    stream: Any = response.extensions.get("network_stream")
    if stream is None:
        return None
    ssl_object = stream.get_extra_info("ssl_object")
    if ssl_object is None:
        return None
    return ssl_object.version()


def _read_capped(
    response: httpx.Response, limit: int, check: Callable[[], None] | None = None
) -> tuple[bytes, bool]:
    """
    Read at most ``limit`` body bytes; the flag reports whether the body was cut short.

    ``check`` runs after every chunk; httpx applies its read timeout per chunk,
    not to the whole body.
    """
    content = bytearray()
    for chunk in response.iter_bytes():
        if check is not None:
            check()
        room = limit - len(content)
        if len(chunk) > room:
            content.extend(chunk[:room])
            return bytes(content), True
        content.extend(chunk)
    return bytes(content), False


class HttpxClient(HttpClient):
    """
    Synchronous httpx client wrapper.

    Transport problems never raise: they come back as ``HttpResponse(ok=False)``
    with ``meta["error_category"]`` set, so the fetcher can record them.
    """

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    @property
    def body_limit(self) -> int:
        return self.settings.max_body_bytes if self.settings.max_body_bytes > 0 else DEFAULT_MAX_BODY_BYTES

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)
        timeout = request.timeout if request.timeout is not None else self.settings.timeout
        follow_redirects = (
            request.allow_redirects if request.allow_redirects is not None else self.settings.allow_redirects
        )
        context = get_probe_context()

        try:
            context.check()
            with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                timeout=timeout,
                follow_redirects=follow_redirects,
            ) as resp:
                # TLS state is only reachable while the connection is still held.
                tls_version = negotiated_tls_version(resp)
                content, truncated = _read_capped(resp, self.body_limit, context.check)
        except Exception as exc:  # noqa: BLE001
            category = categorize_exception(exc)
            logger.debug("%s %s failed (%s): %s", request.method, request.url, category.value, exc)
            return HttpResponse(
                ok=False,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                meta={"error_category": category.value},
            )

        return HttpResponse(
            ok=True,
            status_code=resp.status_code,
            headers=dict(resp.headers),
            content=content,
            url=str(resp.url),
            tls_version=tls_version,
            meta={
                "body_truncated": truncated,
                "body_bytes_read": len(content),
                "body_bytes_limit": self.body_limit,
            },
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxClient:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
