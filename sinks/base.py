from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class NotificationSink(ABC):
    """A single delivery target for notification payloads.

    The dispatcher owns concurrency and error isolation: ``send()`` only
    has to deliver one payload and raise on failure.
    """

    @property
    @abstractmethod
    def label(self) -> str:
        """Short name used in log lines."""

    @abstractmethod
    async def send(self, payload: dict[str, Any]) -> None:
        """Deliver *payload*.  Raise on any failure."""
