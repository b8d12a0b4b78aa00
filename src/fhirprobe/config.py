# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for fhirprobe."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .version import __version__

ENV_PREFIX = "FHIRPROBE_"

DEFAULT_USER_AGENT = f"fhirprobe/{__version__} (FHIR capability statement prober)"
DEFAULT_TIMEOUT = 30.0
# Capability statements of large servers run to several MB; anything beyond this is cut.
DEFAULT_MAX_BODY_BYTES = 32 * 1024 * 1024

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _positive_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _positive_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class HttpSettings:
    """Settings for the HTTP client used by capability probes."""

    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HttpSettings:
        """
        Create settings from ``FHIRPROBE_*`` variables (evaluated at call time).

        Unparseable or non-positive numbers fall back to the defaults.
        """
        env = os.environ if environ is None else environ

        def read(name: str) -> str | None:
            return env.get(ENV_PREFIX + name)

        return cls(
            timeout=_positive_float(read("HTTP_TIMEOUT"), DEFAULT_TIMEOUT),
            user_agent=read("USER_AGENT") or DEFAULT_USER_AGENT,
            allow_redirects=_flag(read("HTTP_REDIRECTS"), True),
            verify_ssl=_flag(read("HTTP_VERIFY_SSL"), True),
            max_body_bytes=_positive_int(read("HTTP_MAX_BODY_BYTES"), DEFAULT_MAX_BODY_BYTES),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from the process environment."""
    return HttpSettings.from_env()
