"""Abstract publisher interface.

Publishers deliver rendered output to a remote store. The contract is
delivery and health only: publishers do not render, recompute, or retry.
A failed delivery raises a DeliveryError and the caller decides what to
do about it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger("counterproductive.adapters")


class DeliveryState(str, Enum):
    """Outcome of the most recent delivery."""
    IDLE = "idle"
    DELIVERED = "delivered"
    FAILED = "failed"
    DISABLED = "disabled"


@dataclass
class PublisherHealth:
    """Health snapshot for a publisher."""
    state: DeliveryState = DeliveryState.IDLE
    publisher_type: str = ""
    endpoint: str = ""
    last_delivery_at: datetime | None = None
    deliveries: int = 0
    errors: int = 0
    message: str = ""
    checked_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class BasePublisher(ABC):
    """Abstract base for report publishers.

    Subclasses implement publish(), which delivers a mapping of
    filename -> content and returns a link to the published result.
    """

    def __init__(self, endpoint: str = ""):
        self.endpoint = endpoint
        self._state = DeliveryState.IDLE
        self._deliveries = 0
        self._errors = 0
        self._last_delivery_at: datetime | None = None
        self._message = ""

    @property
    @abstractmethod
    def publisher_type(self) -> str:
        """Return the publisher type identifier (e.g. 'gist')."""
        ...

    @abstractmethod
    async def publish(self, files: dict[str, str]) -> str:
        """Deliver files to the remote store. Raises DeliveryError on failure."""
        ...

    def health(self) -> PublisherHealth:
        return PublisherHealth(
            state=self._state,
            publisher_type=self.publisher_type,
            endpoint=self.endpoint,
            last_delivery_at=self._last_delivery_at,
            deliveries=self._deliveries,
            errors=self._errors,
            message=self._message,
        )

    def _record_delivery(self) -> None:
        self._deliveries += 1
        self._state = DeliveryState.DELIVERED
        self._last_delivery_at = datetime.now(timezone.utc)
        self._message = ""

    def _record_error(self, msg: str) -> None:
        self._errors += 1
        self._state = DeliveryState.FAILED
        self._message = msg
        logger.warning(
            "Publisher %s error [%s]: %s", self.publisher_type, self.endpoint, msg
        )
