"""Staff operations board and maintenance calendar."""

import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from jet_marina.domain.models import (
    STATUS_LABELS,
    Client,
    MaintenanceBlock,
    OwnershipMode,
    Reservation,
    VesselStatus,
)
from jet_marina.domain.vessels import shared_vessel_names
from jet_marina.services.eligibility import BookingConflict, detect_conflicts
from jet_marina.services.reservations import (
    ClientRepository,
    MaintenanceRepository,
    ReservationRepository,
)

logger = logging.getLogger(__name__)

BOARD_COLUMNS = (
    VesselStatus.AT_DOCK,
    VesselStatus.IN_WATER,
    VesselStatus.NAVIGATING,
    VesselStatus.RETURNED,
)


@dataclass(frozen=True)
class BoardEntry:
    """A reservation as shown on the staff board."""

    reservation: Reservation
    line: str


@dataclass(frozen=True)
class BoardColumn:
    status: VesselStatus
    label: str
    entries: list[BoardEntry]


@dataclass
class OperationsService:
    """Read models and maintenance actions for marina staff."""

    reservation_repository: ReservationRepository
    maintenance_repository: MaintenanceRepository
    client_repository: ClientRepository

    def board(self, day: date) -> list[BoardColumn]:
        """Return the day's reservations grouped by status, sorted by client name."""
        reservations = [
            r for r in self.reservation_repository.list_reservations() if r.date == day
        ]
        clients = {client.id: client for client in self.client_repository.list_clients()}
        columns = []
        for status in BOARD_COLUMNS:
            matching = sorted(
                (r for r in reservations if r.status is status),
                key=lambda r: r.client_name.casefold(),
            )
            columns.append(
                BoardColumn(
                    status=status,
                    label=STATUS_LABELS[status],
                    entries=[
                        BoardEntry(
                            reservation=r, line=board_line(r, clients.get(r.client_id))
                        )
                        for r in matching
                    ],
                )
            )
        return columns

    def conflicts(self) -> list[BookingConflict]:
        """Report shared-vessel dates held by more than one active reservation."""
        conflicts = detect_conflicts(
            tuple(self.reservation_repository.list_reservations()),
            shared_vessel_names(self.client_repository.list_clients()),
        )
        if conflicts:
            logger.warning("Double bookings detected", extra={"count": len(conflicts)})
        return conflicts

    def list_maintenance(self, vessel_name: str | None = None) -> list[MaintenanceBlock]:
        return sorted(
            self.maintenance_repository.list_blocks(vessel_name), key=lambda b: b.date
        )

    def add_maintenance(self, vessel_name: str, day: date) -> MaintenanceBlock:
        block = self.maintenance_repository.create_block(vessel_name.strip(), day)
        logger.info(
            "Maintenance block created",
            extra={"vessel_name": block.vessel_name, "date": day.isoformat()},
        )
        return block

    def remove_maintenance(self, block_id: UUID) -> None:
        self.maintenance_repository.delete_block(block_id)


def board_line(reservation: Reservation, client: Client | None) -> str:
    """Compact one-line description: name, vessel, owner type, time, route."""
    parts = reservation.client_name.split()
    display_name = (
        f"{parts[0]} {parts[-1]}" if len(parts) > 1 else reservation.client_name
    )
    items = [display_name]
    if client is not None:
        if client.ownership is OwnershipMode.SHARED:
            items.extend([client.vessel_name or "---", "Cotista"])
        else:
            model = f"{client.vessel_model or '---'} {client.vessel_year or '---'}"
            items.extend([model.strip(), "Unico"])
    items.extend([reservation.time, reservation.route])
    return " · ".join(item for item in items if item)
