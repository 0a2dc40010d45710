"""Allow/deny outcomes returned by the booking and lifecycle rules."""

from dataclasses import dataclass
from enum import Enum


class DenialReason(str, Enum):
    """Distinguishable reasons for refusing an operation."""

    REGISTRATION_INCOMPLETE = "registration_incomplete"
    CLIENT_BLOCKED = "client_blocked"
    PAST_DATE = "past_date"
    UNRESOLVED_PAST_RESERVATION = "unresolved_past_reservation"
    FUTURE_RESERVATION_ON_FILE = "future_reservation_on_file"
    SAME_DAY_LOCKED = "same_day_locked"
    MAINTENANCE = "maintenance"
    BOOKED_BY_OTHER_OWNER = "booked_by_other_owner"
    ALREADY_BOOKED_BY_YOU = "already_booked_by_you"
    STAFF_ONLY = "staff_only"
    NOT_OWNER = "not_owner"
    TERMINAL_STATUS = "terminal_status"
    ALREADY_IN_STATUS = "already_in_status"
    BACKWARD_TRANSITION = "backward_transition"
    SKIPPED_STATUS = "skipped_status"
    CHECK_IN_PHOTOS_REQUIRED = "check_in_photos_required"
    PHOTOS_REQUIRED = "photos_required"
    PHOTO_LIMIT_EXCEEDED = "photo_limit_exceeded"
    WRONG_STATUS = "wrong_status"
    FUEL_EVIDENCE_INCOMPLETE = "fuel_evidence_incomplete"
    CO_OWNER_LIMIT_REACHED = "co_owner_limit_reached"


_MESSAGES: dict[DenialReason, str] = {
    DenialReason.REGISTRATION_INCOMPLETE: (
        "Registration incomplete. Ask the marina to finish your vessel details."
    ),
    DenialReason.CLIENT_BLOCKED: "Account blocked. Please contact the marina office.",
    DenialReason.PAST_DATE: "That date has already passed. Choose another date.",
    DenialReason.UNRESOLVED_PAST_RESERVATION: (
        "You have an unresolved past reservation. Wait until check-in is complete."
    ),
    DenialReason.FUTURE_RESERVATION_ON_FILE: (
        "You already have a future reservation. New bookings are only allowed "
        "for today once it unlocks."
    ),
    DenialReason.SAME_DAY_LOCKED: (
        "Bookings for today open after the daily unlock time."
    ),
    DenialReason.MAINTENANCE: "Date blocked for maintenance. Choose another date.",
    DenialReason.BOOKED_BY_OTHER_OWNER: "Date already booked by another owner.",
    DenialReason.ALREADY_BOOKED_BY_YOU: (
        "You already hold a reservation for this vessel on this date."
    ),
    DenialReason.STAFF_ONLY: "Only marina staff can do this.",
    DenialReason.NOT_OWNER: "This reservation belongs to another client.",
    DenialReason.TERMINAL_STATUS: "This reservation is already checked in.",
    DenialReason.ALREADY_IN_STATUS: "The reservation is already in that status.",
    DenialReason.BACKWARD_TRANSITION: "A reservation status never moves backward.",
    DenialReason.SKIPPED_STATUS: "Statuses must be advanced one step at a time.",
    DenialReason.CHECK_IN_PHOTOS_REQUIRED: (
        "Add at least one photo before finishing check-in."
    ),
    DenialReason.PHOTOS_REQUIRED: "Select at least one photo to attach.",
    DenialReason.PHOTO_LIMIT_EXCEEDED: "Photo limit reached for this reservation.",
    DenialReason.WRONG_STATUS: "Not allowed at the reservation's current status.",
    DenialReason.FUEL_EVIDENCE_INCOMPLETE: (
        "A fuel receipt needs the receipt image, payee name and payment key."
    ),
    DenialReason.CO_OWNER_LIMIT_REACHED: (
        "This vessel already has the maximum number of co-owners."
    ),
}


@dataclass(frozen=True)
class Allow:
    """The requested operation may be dispatched."""

    allowed: bool = True


@dataclass(frozen=True)
class Deny:
    """The requested operation was refused."""

    reason: DenialReason
    message: str
    conflicting_client_name: str | None = None
    allowed: bool = False


Decision = Allow | Deny

ALLOW = Allow()


def deny(reason: DenialReason, detail: str | None = None, **kwargs: str) -> Deny:
    """Build a denial with the standard message for the reason."""
    message = _MESSAGES[reason]
    if detail:
        message = f"{message} ({detail})"
    return Deny(reason=reason, message=message, **kwargs)
