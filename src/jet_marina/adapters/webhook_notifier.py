"""Client notification adapters."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from jet_marina.domain.models import STATUS_LABELS, Reservation

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Interface for telling a client their reservation changed."""

    async def reservation_updated(self, reservation: Reservation) -> None:
        """Announce a reservation's new status to its client."""


@dataclass
class HttpxWebhookNotifier:
    """Notifier that POSTs a JSON event to a configured webhook."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxWebhookNotifier":
        """Create a notifier with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def reservation_updated(self, reservation: Reservation) -> None:
        """Send the reservation status event."""
        payload = {
            "event": "reservation.status_changed",
            "reservation_id": str(reservation.id),
            "client_id": str(reservation.client_id),
            "status": reservation.status.value,
            "label": STATUS_LABELS[reservation.status],
            "photos": list(reservation.photos),
        }
        response = await self.http_client.post(self.url, json=payload, timeout=10)
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()


@dataclass
class LogNotifier:
    """Notifier used when no webhook is configured."""

    async def reservation_updated(self, reservation: Reservation) -> None:
        logger.info(
            "No notification webhook configured",
            extra={
                "reservation_id": str(reservation.id),
                "status": reservation.status.value,
            },
        )

    async def close(self) -> None:
        return None
