# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""TLS protocol version labels and their classification."""

from __future__ import annotations

import ssl
from enum import Enum
from typing import Any


class TLSVersion(str, Enum):
    SSL_3_0 = "SSL 3.0"
    TLS_1_0 = "TLS 1.0"
    TLS_1_1 = "TLS 1.1"
    TLS_1_2 = "TLS 1.2"
    TLS_1_3 = "TLS 1.3"
    UNKNOWN = "TLS version unknown"
    NO_TLS = "No TLS"

    @classmethod
    def classify(cls, value: Any) -> TLSVersion:
        """
        Map a negotiated protocol to a label. Total over its input.

        Accepts None (no TLS state), ``ssl.TLSVersion`` members, the strings
        returned by ``ssl.SSLObject.version()`` and existing labels. Anything
        else is UNKNOWN.
        """
        if value is None:
            return cls.NO_TLS
        if isinstance(value, cls):
            return value
        if isinstance(value, ssl.TLSVersion):
            return _BY_SSL_CONSTANT.get(value, cls.UNKNOWN)
        if isinstance(value, str):
            return _BY_PROTOCOL_NAME.get(value.strip(), cls.UNKNOWN)
        return cls.UNKNOWN

    @property
    def is_secure(self) -> bool:
        """True for versions accepted as secure transport (1.2 and later)."""
        return self in (TLSVersion.TLS_1_2, TLSVersion.TLS_1_3)


_BY_SSL_CONSTANT = {
    ssl.TLSVersion.SSLv3: TLSVersion.SSL_3_0,
    ssl.TLSVersion.TLSv1: TLSVersion.TLS_1_0,
    ssl.TLSVersion.TLSv1_1: TLSVersion.TLS_1_1,
    ssl.TLSVersion.TLSv1_2: TLSVersion.TLS_1_2,
    ssl.TLSVersion.TLSv1_3: TLSVersion.TLS_1_3,
}

_BY_PROTOCOL_NAME = {
    "SSLv3": TLSVersion.SSL_3_0,
    "TLSv1": TLSVersion.TLS_1_0,
    "TLSv1.1": TLSVersion.TLS_1_1,
    "TLSv1.2": TLSVersion.TLS_1_2,
    "TLSv1.3": TLSVersion.TLS_1_3,
}
_BY_PROTOCOL_NAME.update({version.value: version for version in TLSVersion})


__all__ = ["TLSVersion"]
