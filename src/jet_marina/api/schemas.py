"""Request and response models for the HTTP API."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from jet_marina.domain.decisions import Decision
from jet_marina.domain.models import STATUS_LABELS, Reservation, VesselStatus
from jet_marina.services.eligibility import BookingConflict
from jet_marina.services.operations import BoardColumn
from jet_marina.services.reservations import FuelPropagationResult


class EvaluateRequest(BaseModel):
    date: date
    reservation_id: UUID | None = None


class BookingRequest(BaseModel):
    date: date
    time: str = Field(min_length=1)
    route: str = ""


class PhotosRequest(BaseModel):
    photos: list[str] = Field(min_length=1)


class FuelReceiptRequest(BaseModel):
    receipt_url: str
    payee_name: str
    payee_key: str


class TransitionRequest(BaseModel):
    status: VesselStatus
    photos: list[str] = Field(default_factory=list)


class MaintenanceRequest(BaseModel):
    vessel_name: str = Field(min_length=1)
    date: date


class BlockRequest(BaseModel):
    blocked: bool


class VesselAssignmentRequest(BaseModel):
    vessel_name: str = Field(min_length=1)


class DecisionResponse(BaseModel):
    allowed: bool
    reason: str | None = None
    message: str | None = None
    conflicting_client_name: str | None = None

    @classmethod
    def from_decision(cls, decision: Decision) -> "DecisionResponse":
        if decision.allowed:
            return cls(allowed=True)
        return cls(
            allowed=False,
            reason=decision.reason.value,
            message=decision.message,
            conflicting_client_name=decision.conflicting_client_name,
        )


class FuelEvidenceResponse(BaseModel):
    receipt_url: str
    payee_name: str
    payee_key: str


class ReservationResponse(BaseModel):
    id: UUID
    client_id: UUID
    client_name: str
    vessel_name: str
    date: date
    time: str
    route: str
    status: VesselStatus
    status_label: str
    photos: list[str]
    client_photos: list[str]
    fuel: FuelEvidenceResponse | None = None
    created_at: datetime | None = None
    in_water_at: datetime | None = None
    navigating_at: datetime | None = None
    returned_at: datetime | None = None
    checked_in_at: datetime | None = None

    @classmethod
    def from_domain(cls, reservation: Reservation) -> "ReservationResponse":
        fuel = reservation.fuel
        return cls(
            id=reservation.id,
            client_id=reservation.client_id,
            client_name=reservation.client_name,
            vessel_name=reservation.vessel_name,
            date=reservation.date,
            time=reservation.time,
            route=reservation.route,
            status=reservation.status,
            status_label=STATUS_LABELS[reservation.status],
            photos=list(reservation.photos),
            client_photos=list(reservation.client_photos),
            fuel=FuelEvidenceResponse(
                receipt_url=fuel.receipt_url,
                payee_name=fuel.payee_name,
                payee_key=fuel.payee_key,
            )
            if fuel
            else None,
            created_at=reservation.created_at,
            in_water_at=reservation.in_water_at,
            navigating_at=reservation.navigating_at,
            returned_at=reservation.returned_at,
            checked_in_at=reservation.checked_in_at,
        )


class FuelAttachmentResponse(BaseModel):
    reservation: ReservationResponse
    propagated: bool
    recipient_id: UUID | None = None
    propagation_error: str | None = None

    @classmethod
    def build(
        cls, reservation: Reservation, result: FuelPropagationResult
    ) -> "FuelAttachmentResponse":
        return cls(
            reservation=ReservationResponse.from_domain(reservation),
            propagated=result.success,
            recipient_id=result.recipient_id,
            propagation_error=result.error,
        )


def board_payload(columns: list[BoardColumn]) -> list[dict[str, object]]:
    return [
        {
            "status": column.status.value,
            "label": column.label,
            "entries": [
                {
                    "line": entry.line,
                    "reservation": ReservationResponse.from_domain(
                        entry.reservation
                    ).model_dump(mode="json"),
                }
                for entry in column.entries
            ],
        }
        for column in columns
    ]


def conflict_payload(conflicts: list[BookingConflict]) -> list[dict[str, object]]:
    return [
        {
            "vessel_name": conflict.vessel_name,
            "date": conflict.date.isoformat(),
            "winner_id": str(conflict.winner.id),
            "winner_name": conflict.winner.client_name,
            "loser_ids": [str(loser.id) for loser in conflict.losers],
        }
        for conflict in conflicts
    ]
