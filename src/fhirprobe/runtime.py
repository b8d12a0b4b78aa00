# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level fhirprobe facade for probe and validation workflows."""

from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager, suppress
from dataclasses import replace

from .capability.querier import (
    get_and_send_capability_statement,
    request_capability_statement,
    request_smart_configuration_status,
)
from .config import HttpSettings, load_http_settings
from .errors import CapabilityParseError
from .http.client import HttpClient, create_default_http_client
from .http.models import HTTP_STATUS_NOT_ATTEMPTED
from .models import Assessment, ProbeResult, QuerierArgs
from .publisher import MessagePublisher
from .utils.context import ProbeContext, probe_context
from .validation import validate_probe_result

logger = logging.getLogger(__name__)


class FhirProbe:
    """
    Convenience wrapper that shares one HTTP client across probe, SMART and publish calls.

    Each call runs inside its own ProbeContext, so ``timeout`` and ``cancel_event``
    bound every round trip that call makes.
    """

    def __init__(self, http_client: HttpClient | None = None, http_settings: HttpSettings | None = None):
        self.http_settings = http_settings or load_http_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)

    def _context(
        self, timeout: float | None, cancel_event: threading.Event | None
    ) -> AbstractContextManager[ProbeContext]:
        return probe_context(
            timeout=timeout,
            cancel_event=cancel_event,
            http_client=self.http_client,
            http_settings=self.http_settings,
        )

    def probe(
        self,
        url: str,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ProbeResult:
        """Acquire the capability statement; CapabilityParseError propagates."""
        with self._context(timeout, cancel_event):
            return request_capability_statement(url, self.http_client)

    def smart_configuration_status(
        self,
        url: str,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> int:
        with self._context(timeout, cancel_event):
            return request_smart_configuration_status(url, self.http_client)

    def assess(
        self,
        url: str,
        *,
        check_smart: bool = False,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Assessment:
        """Probe then validate. A failed probe still yields a full (mostly failing) report."""
        try:
            result = self.probe(url, timeout=timeout, cancel_event=cancel_event)
        except CapabilityParseError as exc:
            logger.warning("Capability statement from %s could not be parsed: %s", url, exc)
            partial = exc.result if isinstance(exc.result, ProbeResult) else ProbeResult(url=url)
            result = replace(partial, error=str(exc))

        smart_status = HTTP_STATUS_NOT_ATTEMPTED
        if check_smart:
            smart_status = self.smart_configuration_status(url, timeout=timeout, cancel_event=cancel_event)

        report = validate_probe_result(result, smart_http_status=smart_status)
        return Assessment(probe=result, validation=report, smart_http_status=smart_status)

    def publish(
        self,
        url: str,
        publisher: MessagePublisher,
        queue_name: str,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ProbeResult:
        """Probe ``url`` and hand the message to ``publisher``; PublishError propagates."""
        args = QuerierArgs(fhir_url=url, client=self.http_client, publisher=publisher, queue_name=queue_name)
        with self._context(timeout, cancel_event):
            return get_and_send_capability_statement(args)

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> FhirProbe:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
