"""Vessel lifecycle state machine and its evidence rules."""

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime

from jet_marina.domain.decisions import ALLOW, Decision, DenialReason, deny
from jet_marina.domain.models import (
    TRANSITION_TIMESTAMP_FIELDS,
    UNKNOWN_CREATED_AT,
    Actor,
    FuelEvidence,
    Reservation,
    VesselStatus,
)
from jet_marina.domain.vessels import same_vessel

DEFAULT_CHECKIN_PHOTO_LIMIT = 10
DEFAULT_CLIENT_PHOTO_LIMIT = 6

# Statuses whose holder may receive a forwarded fuel receipt.
_FUEL_RECIPIENT_STATUSES = {VesselStatus.RETURNED, VesselStatus.CHECKED_IN}


@dataclass(frozen=True)
class TransitionEvidence:
    """Evidence supplied alongside a status change."""

    photos: tuple[str, ...] = ()


def request_transition(
    reservation: Reservation,
    target: VesselStatus,
    evidence: TransitionEvidence,
    actor: Actor,
    photo_limit: int = DEFAULT_CHECKIN_PHOTO_LIMIT,
) -> Decision:
    """Validate a status change before the caller is allowed to persist it."""
    if not actor.is_staff:
        return deny(DenialReason.STAFF_ONLY)
    current = reservation.status
    if current.is_terminal:
        return deny(DenialReason.TERMINAL_STATUS)
    if target == current:
        return deny(DenialReason.ALREADY_IN_STATUS)
    if target.is_before(current):
        return deny(DenialReason.BACKWARD_TRANSITION)
    if target != current.next:
        return deny(DenialReason.SKIPPED_STATUS)
    if target is VesselStatus.CHECKED_IN:
        if not evidence.photos:
            return deny(DenialReason.CHECK_IN_PHOTOS_REQUIRED)
        if len(evidence.photos) > photo_limit:
            return deny(DenialReason.PHOTO_LIMIT_EXCEEDED, detail=f"max {photo_limit}")
    return ALLOW


def transition_fields(
    reservation: Reservation,
    target: VesselStatus,
    evidence: TransitionEvidence,
    now: datetime,
) -> dict[str, object]:
    """Build the partial update for an approved transition.

    The entry timestamp is never rewritten and never earlier than an existing one.
    """
    fields: dict[str, object] = {"status": target}
    column = TRANSITION_TIMESTAMP_FIELDS.get(target)
    if column and getattr(reservation, column) is None:
        stamps = reservation.timestamps()
        fields[column] = max([now, *stamps]) if stamps else now
    if target is VesselStatus.CHECKED_IN:
        fields["photos"] = tuple(evidence.photos)
    return fields


def apply_transition(
    reservation: Reservation,
    target: VesselStatus,
    evidence: TransitionEvidence,
    now: datetime,
) -> Reservation:
    """Return the reservation as it looks after an approved transition."""
    return replace(reservation, **transition_fields(reservation, target, evidence, now))


def can_edit(reservation: Reservation, actor: Actor) -> Decision:
    """Clients may change date, time and route only while the vessel is at the dock."""
    if reservation.client_id != actor.id:
        return deny(DenialReason.NOT_OWNER)
    if reservation.status is not VesselStatus.AT_DOCK:
        return deny(DenialReason.WRONG_STATUS)
    return ALLOW


def can_delete(reservation: Reservation, actor: Actor) -> Decision:
    """Staff may delete at any status; the owner only while at the dock."""
    if actor.is_staff:
        return ALLOW
    return can_edit(reservation, actor)


def can_attach_client_photos(
    reservation: Reservation,
    photos: Sequence[str],
    actor: Actor,
    limit: int = DEFAULT_CLIENT_PHOTO_LIMIT,
) -> Decision:
    """Trip photos are a side attachment while the vessel is in the water."""
    if reservation.client_id != actor.id:
        return deny(DenialReason.NOT_OWNER)
    if reservation.status is not VesselStatus.IN_WATER:
        return deny(DenialReason.WRONG_STATUS)
    if not photos:
        return deny(DenialReason.PHOTOS_REQUIRED)
    if len(reservation.client_photos) + len(photos) > limit:
        return deny(DenialReason.PHOTO_LIMIT_EXCEEDED, detail=f"max {limit}")
    return ALLOW


def can_attach_fuel_receipt(
    reservation: Reservation, evidence: FuelEvidence, actor: Actor
) -> Decision:
    """A fuel receipt may be attached by the owner while navigating."""
    if reservation.client_id != actor.id:
        return deny(DenialReason.NOT_OWNER)
    if reservation.status is not VesselStatus.NAVIGATING:
        return deny(DenialReason.WRONG_STATUS)
    if not all(
        value.strip()
        for value in (evidence.receipt_url, evidence.payee_name, evidence.payee_key)
    ):
        return deny(DenialReason.FUEL_EVIDENCE_INCOMPLETE)
    return ALLOW


def find_fuel_recipient(
    reservation: Reservation, reservations: Sequence[Reservation]
) -> Reservation | None:
    """Return the latest earlier outing on the same vessel that has come back."""
    candidates = [
        other
        for other in reservations
        if other.id != reservation.id
        and other.status in _FUEL_RECIPIENT_STATUSES
        and same_vessel(other.vessel_name, reservation.vessel_name)
        and _sort_key(other) < _sort_key(reservation)
    ]
    if not candidates:
        return None
    return max(candidates, key=_sort_key)


def _sort_key(reservation: Reservation) -> tuple[date, str, datetime]:
    created = reservation.created_at or UNKNOWN_CREATED_AT
    return (reservation.date, reservation.time, created)
