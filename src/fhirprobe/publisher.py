# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Queue collaborator interface for finished probe messages."""

from typing import Protocol


class MessagePublisher(Protocol):
    """Hands a serialized message to a named queue. Delivery is the queue's concern."""

    def send(self, queue_name: str, message: str) -> None: ...


__all__ = ["MessagePublisher"]
