"""Booking eligibility rules for shared and sole-owned vessels.

Every function here is a pure function of the client, the requested date, the
snapshot it is handed and the booking clock. Nothing is cached between calls,
so callers must re-evaluate right before dispatching a write.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from jet_marina.domain.dates import BookingClock, date_range
from jet_marina.domain.decisions import ALLOW, Decision, DenialReason, deny
from jet_marina.domain.models import (
    UNKNOWN_CREATED_AT,
    Client,
    OwnershipMode,
    Reservation,
    Snapshot,
)
from jet_marina.domain.vessels import normalize_vessel_name, same_vessel

logger = logging.getLogger(__name__)


def evaluate_booking(
    client: Client,
    target: date,
    snapshot: Snapshot,
    clock: BookingClock,
    exclude_reservation_id: UUID | None = None,
) -> Decision:
    """Decide whether the client may book (or move a booking to) the target date.

    ``exclude_reservation_id`` is the reservation being rescheduled; it is left
    out of every scan so a booking never conflicts with itself.
    """
    view = snapshot.without(exclude_reservation_id)
    decision = _evaluate(client, target, view, clock)
    if not decision.allowed:
        logger.info(
            "Booking denied",
            extra={
                "client_id": str(client.id),
                "date": target.isoformat(),
                "reason": decision.reason.value,
            },
        )
    return decision


def _evaluate(  # noqa: PLR0911
    client: Client, target: date, snapshot: Snapshot, clock: BookingClock
) -> Decision:
    standing = check_standing(client)
    if not standing.allowed:
        return standing
    if target < clock.today:
        return deny(DenialReason.PAST_DATE)
    if target == clock.today and not clock.unlocked:
        return deny(DenialReason.SAME_DAY_LOCKED)

    if client.ownership is OwnershipMode.SOLE:
        return _own_date_conflict(client, target, snapshot)

    own_active = active_reservations_for(client.id, snapshot.reservations)
    if any(r.date < clock.today for r in own_active):
        return deny(DenialReason.UNRESOLVED_PAST_RESERVATION)
    if target != clock.today and has_forward_blocking_reservation(own_active, clock):
        return deny(DenialReason.FUTURE_RESERVATION_ON_FILE)
    if is_maintenance_date(client.vessel_name, target, snapshot):
        return deny(DenialReason.MAINTENANCE)

    conflict = find_vessel_date_conflict(client.vessel_name, target, snapshot)
    if conflict is None:
        return ALLOW
    if conflict.client_id == client.id:
        return deny(DenialReason.ALREADY_BOOKED_BY_YOU)
    return deny(
        DenialReason.BOOKED_BY_OTHER_OWNER,
        detail=conflict.client_name,
        conflicting_client_name=conflict.client_name,
    )


def check_standing(client: Client) -> Decision:
    """Profile and hold gates every client write passes, whatever the date."""
    if not is_profile_complete(client):
        return deny(DenialReason.REGISTRATION_INCOMPLETE)
    if client.is_blocked:
        return deny(DenialReason.CLIENT_BLOCKED)
    return ALLOW


def _own_date_conflict(client: Client, target: date, snapshot: Snapshot) -> Decision:
    # Sole-owned vessels are never checked against other clients.
    for reservation in active_reservations_for(client.id, snapshot.reservations):
        if reservation.date == target:
            return deny(DenialReason.ALREADY_BOOKED_BY_YOU)
    return ALLOW


def is_profile_complete(client: Client) -> bool:
    """Shared owners need a vessel assignment; sole owners need model and year."""
    if client.ownership is OwnershipMode.SHARED:
        return bool(normalize_vessel_name(client.vessel_name))
    return bool((client.vessel_model or "").strip()) and bool(
        (client.vessel_year or "").strip()
    )


def active_reservations_for(
    client_id: UUID, reservations: tuple[Reservation, ...]
) -> list[Reservation]:
    """Return the client's non-terminal reservations."""
    return [r for r in reservations if r.client_id == client_id and not r.is_terminal]


def has_forward_blocking_reservation(
    reservations: list[Reservation], clock: BookingClock
) -> bool:
    """True when a reservation ahead of today (or today, before unlock) is on file."""
    return any(
        r.date > clock.today or (r.date == clock.today and not clock.unlocked)
        for r in reservations
        if not r.is_terminal
    )


def is_maintenance_date(
    vessel_name: str | None, target: date, snapshot: Snapshot
) -> bool:
    return any(
        block.date == target and same_vessel(block.vessel_name, vessel_name)
        for block in snapshot.maintenance_blocks
    )


def find_vessel_date_conflict(
    vessel_name: str | None, target: date, snapshot: Snapshot
) -> Reservation | None:
    """Return the non-terminal reservation holding the vessel on that date, if any.

    Reservations without a vessel name never match.
    """
    matches = [
        r
        for r in snapshot.reservations
        if r.date == target
        and not r.is_terminal
        and same_vessel(r.vessel_name, vessel_name)
    ]
    if not matches:
        return None
    return min(matches, key=_creation_order)


def compute_blocked_dates(
    client: Client, snapshot: Snapshot, exclude_reservation_id: UUID | None = None
) -> frozenset[date]:
    """Dates the calendar should show as taken for the client's shared vessel.

    Advisory only; submissions are re-validated through ``evaluate_booking``.
    """
    if client.ownership is not OwnershipMode.SHARED:
        return frozenset()
    if not normalize_vessel_name(client.vessel_name):
        return frozenset()
    view = snapshot.without(exclude_reservation_id)
    reserved = {
        r.date
        for r in view.reservations
        if not r.is_terminal and same_vessel(r.vessel_name, client.vessel_name)
    }
    maintenance = {
        block.date
        for block in view.maintenance_blocks
        if same_vessel(block.vessel_name, client.vessel_name)
    }
    return frozenset(reserved | maintenance)


def selectable_dates(
    client: Client,
    snapshot: Snapshot,
    clock: BookingClock,
    start: date,
    end: date,
) -> list[date]:
    """Return the dates in [start, end] the client could book right now."""
    return [
        day
        for day in date_range(start, end)
        if evaluate_booking(client, day, snapshot, clock).allowed
    ]


@dataclass(frozen=True)
class BookingConflict:
    """Two or more active reservations holding one shared vessel on one day."""

    vessel_name: str
    date: date
    winner: Reservation
    losers: tuple[Reservation, ...]


def detect_conflicts(
    reservations: tuple[Reservation, ...], shared_vessels: set[str]
) -> list[BookingConflict]:
    """Report double bookings left behind by concurrent writers.

    Within each (vessel, date) group the earliest-created reservation wins.
    """
    groups: dict[tuple[str, date], list[Reservation]] = {}
    for reservation in reservations:
        key = normalize_vessel_name(reservation.vessel_name)
        if reservation.is_terminal or not key or key not in shared_vessels:
            continue
        groups.setdefault((key, reservation.date), []).append(reservation)

    conflicts = []
    for (_, day), group in sorted(groups.items(), key=lambda item: item[0][1]):
        if len(group) < 2:  # noqa: PLR2004
            continue
        ordered = sorted(group, key=_creation_order)
        conflicts.append(
            BookingConflict(
                vessel_name=ordered[0].vessel_name,
                date=day,
                winner=ordered[0],
                losers=tuple(ordered[1:]),
            )
        )
    return conflicts


def _creation_order(reservation: Reservation) -> tuple[bool, datetime, str]:
    created = reservation.created_at
    return (created is None, created or UNKNOWN_CREATED_AT, str(reservation.id))
