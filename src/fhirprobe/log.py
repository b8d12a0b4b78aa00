# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for fhirprobe."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# httpx/httpcore log every request line at INFO; a probe makes several per endpoint.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def resolve_log_level(level: str | int | None = None) -> int:
    """Turn a level name or number (default ``FHIRPROBE_LOG_LEVEL``, then WARNING) into a logging level."""
    if isinstance(level, int):
        return level
    name = (level or os.getenv("FHIRPROBE_LOG_LEVEL") or "WARNING").strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: str | int | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    effective = resolve_log_level(level)
    logging.basicConfig(level=effective, format=LOG_FORMAT)
    if effective > logging.DEBUG:
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(max(effective, logging.WARNING))


__all__ = ["resolve_log_level", "setup_logging"]
