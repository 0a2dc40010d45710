"""Reservation use cases: booking, rescheduling, attachments and status changes."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from typing import Protocol
from uuid import UUID

from jet_marina.domain.dates import BookingClock, month_dates
from jet_marina.domain.decisions import Decision
from jet_marina.domain.models import (
    Actor,
    Client,
    FuelEvidence,
    MaintenanceBlock,
    OwnershipMode,
    Reservation,
    Snapshot,
    VesselStatus,
)
from jet_marina.errors import (
    CollaboratorFailure,
    NotFound,
    StaleSnapshotConflict,
    ValidationDenied,
)
from jet_marina.services.eligibility import (
    check_standing,
    compute_blocked_dates,
    evaluate_booking,
    find_vessel_date_conflict,
    selectable_dates,
)
from jet_marina.services.lifecycle import (
    DEFAULT_CHECKIN_PHOTO_LIMIT,
    DEFAULT_CLIENT_PHOTO_LIMIT,
    TransitionEvidence,
    can_attach_client_photos,
    can_attach_fuel_receipt,
    can_delete,
    can_edit,
    find_fuel_recipient,
    request_transition,
    transition_fields,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewReservation:
    """Fields a client supplies when booking."""

    client_id: UUID
    client_name: str
    vessel_name: str
    date: date
    time: str
    route: str


class ReservationRepository(Protocol):
    """Persistence interface for reservations."""

    def list_reservations(self, client_id: UUID | None = None) -> list[Reservation]:
        """Return one client's reservations, or everyone's when client_id is None."""

    def get_reservation(self, reservation_id: UUID) -> Reservation | None:
        """Return a reservation by id, if present."""

    def create_reservation(self, fields: NewReservation) -> Reservation:
        """Create a reservation at the initial status and return it."""

    def update_reservation(
        self,
        reservation_id: UUID,
        fields: dict[str, object],
        expected_status: VesselStatus | None = None,
    ) -> Reservation:
        """Apply a partial update; raise StaleSnapshotConflict when nothing matched."""

    def delete_reservation(self, reservation_id: UUID) -> None:
        """Delete a reservation."""


class MaintenanceRepository(Protocol):
    """Persistence interface for maintenance blocks."""

    def list_blocks(self, vessel_name: str | None = None) -> list[MaintenanceBlock]:
        """Return maintenance blocks, optionally for a single vessel."""

    def create_block(self, vessel_name: str, day: date) -> MaintenanceBlock:
        """Create a maintenance block."""

    def delete_block(self, block_id: UUID) -> None:
        """Delete a maintenance block."""


class ClientRepository(Protocol):
    """Persistence interface for client profiles."""

    def get_client(self, client_id: UUID) -> Client | None:
        """Return a client profile by id, if present."""

    def list_clients(self) -> list[Client]:
        """Return all client profiles."""

    def update_client(self, client_id: UUID, fields: dict[str, object]) -> Client:
        """Apply a partial update to a client profile."""


@dataclass(frozen=True)
class BookingPolicy:
    """Tunable booking parameters."""

    timezone_name: str = "America/Sao_Paulo"
    unlock_time: time = time(0, 1)
    client_photo_limit: int = DEFAULT_CLIENT_PHOTO_LIMIT
    checkin_photo_limit: int = DEFAULT_CHECKIN_PHOTO_LIMIT


@dataclass(frozen=True)
class FuelPropagationResult:
    """Outcome of forwarding a fuel receipt to the previous renter."""

    success: bool
    recipient_id: UUID | None = None
    error: str | None = None


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def require(decision: Decision) -> None:
    """Raise ValidationDenied for a denial."""
    if not decision.allowed:
        raise ValidationDenied(decision)


@dataclass
class ReservationService:
    """Application service gating every reservation write through the rules."""

    reservation_repository: ReservationRepository
    maintenance_repository: MaintenanceRepository
    client_repository: ClientRepository
    policy: BookingPolicy = field(default_factory=BookingPolicy)
    clock: Callable[[], datetime] = _utc_now

    def booking_clock(self) -> BookingClock:
        """Return today's civil date and unlock state in the marina zone."""
        return BookingClock.at(
            self.clock(), self.policy.unlock_time, self.policy.timezone_name
        )

    def get_client(self, client_id: UUID) -> Client:
        client = self.client_repository.get_client(client_id)
        if client is None:
            raise NotFound(f"Client {client_id} not found")
        return client

    def get_reservation(self, reservation_id: UUID) -> Reservation:
        reservation = self.reservation_repository.get_reservation(reservation_id)
        if reservation is None:
            raise NotFound(f"Reservation {reservation_id} not found")
        return reservation

    def snapshot(self, vessel_name: str | None = None) -> Snapshot:
        """Fetch a fresh snapshot of all reservations and the vessel's blocks."""
        reservations = self.reservation_repository.list_reservations()
        blocks = (
            self.maintenance_repository.list_blocks(vessel_name) if vessel_name else []
        )
        return Snapshot(
            reservations=tuple(reservations), maintenance_blocks=tuple(blocks)
        )

    def list_reservations(self, client_id: UUID) -> list[Reservation]:
        """Return the client's reservations, latest date first."""
        reservations = self.reservation_repository.list_reservations(client_id)
        return sorted(reservations, key=lambda r: (r.date, r.time), reverse=True)

    def current_reservation(self, client_id: UUID) -> Reservation | None:
        reservations = self.list_reservations(client_id)
        return reservations[0] if reservations else None

    def evaluate(
        self, client_id: UUID, day: date, exclude_reservation_id: UUID | None = None
    ) -> Decision:
        """Evaluate a booking against a freshly fetched snapshot."""
        client = self.get_client(client_id)
        return evaluate_booking(
            client,
            day,
            self.snapshot(client.vessel_name),
            self.booking_clock(),
            exclude_reservation_id=exclude_reservation_id,
        )

    def blocked_dates(self, client_id: UUID) -> frozenset[date]:
        client = self.get_client(client_id)
        return compute_blocked_dates(client, self.snapshot(client.vessel_name))

    def calendar(self, client_id: UUID, year: int, month: int) -> list[date]:
        """Return the bookable dates of a month for the client."""
        client = self.get_client(client_id)
        days = month_dates(year, month)
        return selectable_dates(
            client,
            self.snapshot(client.vessel_name),
            self.booking_clock(),
            days[0],
            days[-1],
        )

    def book(self, client_id: UUID, day: date, at: str, route: str) -> Reservation:
        """Create a reservation after re-evaluating against a fresh snapshot."""
        client = self.get_client(client_id)
        require(
            evaluate_booking(
                client, day, self.snapshot(client.vessel_name), self.booking_clock()
            )
        )
        created = self.reservation_repository.create_reservation(
            NewReservation(
                client_id=client.id,
                client_name=client.name,
                vessel_name=client.vessel_name or "",
                date=day,
                time=at,
                route=route,
            )
        )
        logger.info(
            "Reservation created",
            extra={"reservation_id": str(created.id), "date": day.isoformat()},
        )
        self._verify_not_overtaken(client, created)
        return created

    def _verify_not_overtaken(self, client: Client, reservation: Reservation) -> None:
        """Surface a booking that lost a race with a concurrent writer."""
        if client.ownership is not OwnershipMode.SHARED:
            return
        winner = find_vessel_date_conflict(
            reservation.vessel_name, reservation.date, self.snapshot()
        )
        if winner is not None and winner.id != reservation.id:
            logger.warning(
                "Reservation overtaken by concurrent booking",
                extra={
                    "reservation_id": str(reservation.id),
                    "winner_id": str(winner.id),
                },
            )
            raise StaleSnapshotConflict(
                f"Date already booked by another owner: {winner.client_name}. "
                "Refresh and choose another date.",
                conflicting_client_name=winner.client_name,
            )

    def reschedule(  # noqa: PLR0913
        self,
        client_id: UUID,
        reservation_id: UUID,
        day: date,
        at: str,
        route: str,
    ) -> Reservation:
        """Move an at-dock reservation, excluding itself from the conflict scan."""
        client = self.get_client(client_id)
        reservation = self.get_reservation(reservation_id)
        require(can_edit(reservation, client.actor))
        if day == reservation.date:
            require(check_standing(client))
        else:
            require(
                evaluate_booking(
                    client,
                    day,
                    self.snapshot(client.vessel_name),
                    self.booking_clock(),
                    exclude_reservation_id=reservation.id,
                )
            )
        return self.reservation_repository.update_reservation(
            reservation.id,
            {"date": day, "time": at, "route": route},
            expected_status=VesselStatus.AT_DOCK,
        )

    def cancel(self, actor: Actor, reservation_id: UUID) -> None:
        """Delete a reservation if the actor is allowed to at its current status."""
        reservation = self.get_reservation(reservation_id)
        require(can_delete(reservation, actor))
        self.reservation_repository.delete_reservation(reservation.id)
        logger.info(
            "Reservation deleted",
            extra={"reservation_id": str(reservation.id), "by": str(actor.id)},
        )

    def attach_client_photos(
        self, client_id: UUID, reservation_id: UUID, photos: list[str]
    ) -> Reservation:
        """Append trip photos taken by the client while in the water."""
        client = self.get_client(client_id)
        reservation = self.get_reservation(reservation_id)
        require(
            can_attach_client_photos(
                reservation, photos, client.actor, self.policy.client_photo_limit
            )
        )
        return self.reservation_repository.update_reservation(
            reservation.id,
            {"client_photos": (*reservation.client_photos, *photos)},
            expected_status=VesselStatus.IN_WATER,
        )

    def attach_fuel_receipt(
        self, client_id: UUID, reservation_id: UUID, evidence: FuelEvidence
    ) -> tuple[Reservation, FuelPropagationResult]:
        """Save the receipt, then forward it to the previous renter if possible."""
        client = self.get_client(client_id)
        reservation = self.get_reservation(reservation_id)
        require(can_attach_fuel_receipt(reservation, evidence, client.actor))
        updated = self.reservation_repository.update_reservation(
            reservation.id,
            {"fuel": evidence},
            expected_status=VesselStatus.NAVIGATING,
        )
        return updated, self.propagate_fuel_evidence(updated)

    def propagate_fuel_evidence(
        self, reservation: Reservation
    ) -> FuelPropagationResult:
        """Copy the fuel receipt onto the previous renter's reservation.

        Never raises; the primary save does not depend on this outcome.
        """
        if reservation.fuel is None:
            return FuelPropagationResult(success=False, error="no fuel evidence")
        try:
            recipient = find_fuel_recipient(
                reservation, self.reservation_repository.list_reservations()
            )
            if recipient is None:
                return FuelPropagationResult(
                    success=False, error="no previous renter"
                )
            self.reservation_repository.update_reservation(
                recipient.id, {"fuel": reservation.fuel}
            )
        except (CollaboratorFailure, StaleSnapshotConflict) as exc:
            logger.exception(
                "Failed to forward fuel receipt",
                extra={"reservation_id": str(reservation.id)},
            )
            return FuelPropagationResult(success=False, error=str(exc))
        return FuelPropagationResult(success=True, recipient_id=recipient.id)

    def advance_status(
        self,
        actor: Actor,
        reservation_id: UUID,
        target: VesselStatus,
        photos: list[str] | None = None,
    ) -> Reservation:
        """Move a reservation one step forward on behalf of staff."""
        reservation = self.get_reservation(reservation_id)
        evidence = TransitionEvidence(photos=tuple(photos or ()))
        require(
            request_transition(
                reservation,
                target,
                evidence,
                actor,
                photo_limit=self.policy.checkin_photo_limit,
            )
        )
        updated = self.reservation_repository.update_reservation(
            reservation.id,
            transition_fields(reservation, target, evidence, self.clock()),
            expected_status=reservation.status,
        )
        logger.info(
            "Reservation status advanced",
            extra={"reservation_id": str(reservation.id), "status": target.value},
        )
        return updated
