"""Client administration: holds and shared-vessel assignment."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from jet_marina.domain.decisions import DenialReason, deny
from jet_marina.domain.models import Client, OwnershipMode, VesselGroup
from jet_marina.domain.vessels import co_owner_limit, count_co_owners
from jet_marina.errors import NotFound, ValidationDenied
from jet_marina.services.reservations import ClientRepository

logger = logging.getLogger(__name__)


class VesselGroupRepository(Protocol):
    """Persistence interface for shared vessel groups."""

    def list_groups(self) -> list[VesselGroup]:
        """Return all vessel groups ordered by name."""


@dataclass
class ClientService:
    """Staff-facing client profile actions."""

    client_repository: ClientRepository
    vessel_group_repository: VesselGroupRepository
    default_co_owner_limit: int = 10

    def get_client(self, client_id: UUID) -> Client:
        client = self.client_repository.get_client(client_id)
        if client is None:
            raise NotFound(f"Client {client_id} not found")
        return client

    def set_blocked(self, client_id: UUID, blocked: bool) -> Client:
        """Place or lift an administrative hold."""
        self.get_client(client_id)
        updated = self.client_repository.update_client(
            client_id, {"is_blocked": blocked}
        )
        logger.info(
            "Client hold changed",
            extra={"client_id": str(client_id), "blocked": blocked},
        )
        return updated

    def assign_shared_vessel(self, client_id: UUID, vessel_name: str) -> Client:
        """Make the client a co-owner of a vessel, respecting its co-owner cap."""
        client = self.get_client(client_id)
        name = " ".join(vessel_name.split())
        limit = co_owner_limit(
            name, self.vessel_group_repository.list_groups(), self.default_co_owner_limit
        )
        current = count_co_owners(
            name, self.client_repository.list_clients(), exclude=client
        )
        if current >= limit:
            raise ValidationDenied(
                deny(DenialReason.CO_OWNER_LIMIT_REACHED, detail=f"max {limit}")
            )
        return self.client_repository.update_client(
            client_id,
            {"ownership": OwnershipMode.SHARED, "vessel_name": name},
        )
