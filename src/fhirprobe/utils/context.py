# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Per-probe ambient context.

This module provides a ContextVar-backed ProbeContext that carries common probe
plumbing (deadline, cancellation, http client). The fetcher reads from this
context so that one caller-supplied deadline bounds every round trip of a probe.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from ..config import HttpSettings, load_http_settings
from ..errors import ProbeCancelledError

if TYPE_CHECKING:
    from ..http.client import HttpClient


@dataclass(frozen=True)
class ProbeContext:
    deadline: float | None = None
    cancel_event: threading.Event | None = None
    http_client: HttpClient | None = None
    http_settings: HttpSettings | None = None

    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when no deadline is set."""
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def check(self) -> None:
        """Raise ProbeCancelledError when the context is cancelled or past its deadline."""
        if self.cancelled():
            raise ProbeCancelledError("context canceled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise ProbeCancelledError("context deadline exceeded")


_current_probe_context: ContextVar[ProbeContext | None] = ContextVar("fhirprobe_probe_context", default=None)


def get_probe_context() -> ProbeContext:
    """Return the current ambient probe context."""
    return _current_probe_context.get() or ProbeContext()


def get_http_settings() -> HttpSettings:
    """Return HttpSettings from context, falling back to loading defaults."""
    context = get_probe_context()
    if context.http_settings is not None:
        return context.http_settings
    return load_http_settings()


@contextmanager
def probe_context(*, timeout: float | None = None, **overrides: Any) -> Iterator[ProbeContext]:
    """
    Context manager that layers overrides onto the ambient ProbeContext.

    ``timeout`` is converted into an absolute deadline; an outer deadline that
    expires sooner is kept. None-valued overrides are ignored to preserve outer
    context values.
    """
    current = get_probe_context()
    filtered = {key: value for key, value in overrides.items() if value is not None}
    if timeout is not None:
        deadline = time.monotonic() + timeout
        outer = filtered.get("deadline", current.deadline)
        filtered["deadline"] = deadline if outer is None else min(outer, deadline)
    new_context = replace(current, **filtered) if filtered else current
    token = _current_probe_context.set(new_context)
    try:
        yield new_context
    finally:
        _current_probe_context.reset(token)


__all__ = [
    "ProbeCancelledError",
    "ProbeContext",
    "get_http_settings",
    "get_probe_context",
    "probe_context",
]
