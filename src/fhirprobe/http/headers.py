# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header lookup utilities.

HTTP header field names are case-insensitive (RFC 9110). Responses travel through
fhirprobe as plain dicts, so reads go through ``header_value`` rather than direct
indexing.
"""

from __future__ import annotations

from typing import Any

import httpx


def header_value(headers: Any, name: str, default: str = "") -> str:
    """
    Return a header value using case-insensitive key matching.

    ``headers`` may be a dict, ``httpx.Headers`` or an iterable of pairs. Values
    that httpx cannot interpret as headers yield ``default``.
    """
    if not headers or not name:
        return default
    try:
        value = httpx.Headers(headers).get(name)
    except (TypeError, ValueError):
        return default
    return default if value is None else value.strip()


__all__ = ["header_value"]
