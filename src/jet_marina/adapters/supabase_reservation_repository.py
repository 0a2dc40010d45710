"""Supabase-backed reservation repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from jet_marina.adapters.supabase_support import (
    execute,
    format_value,
    parse_timestamp,
)
from jet_marina.domain.dates import parse_civil_date
from jet_marina.domain.models import FuelEvidence, Reservation, VesselStatus
from jet_marina.errors import CollaboratorFailure, StaleSnapshotConflict
from jet_marina.services.reservations import NewReservation, ReservationRepository

_COLUMNS = (
    "id, user_id, user_name, jet_name, date, time, route, status, photos, "
    "client_photos, fuel_receipt_url, fuel_payee_name, fuel_payee_key, "
    "created_at, in_water_at, navigating_at, returned_at, checked_in_at"
)

# Domain field name -> column name, where they differ.
_COLUMN_NAMES = {
    "client_id": "user_id",
    "client_name": "user_name",
    "vessel_name": "jet_name",
}


@dataclass
class SupabaseReservationRepository(ReservationRepository):
    """Supabase implementation for reservations."""

    client: Client

    def list_reservations(self, client_id: UUID | None = None) -> list[Reservation]:
        """Return reservations, newest first."""
        query = self.client.table("reservations").select(_COLUMNS)
        if client_id is not None:
            query = query.eq("user_id", str(client_id))
        rows = execute(query.order("created_at", desc=True), "fetch reservations")
        return [_to_reservation(row) for row in rows]

    def get_reservation(self, reservation_id: UUID) -> Reservation | None:
        """Return a reservation by id, if present."""
        rows = execute(
            self.client.table("reservations")
            .select(_COLUMNS)
            .eq("id", str(reservation_id))
            .limit(1),
            "fetch reservation",
        )
        return _to_reservation(rows[0]) if rows else None

    def create_reservation(self, fields: NewReservation) -> Reservation:
        """Insert a reservation at the initial status."""
        rows = execute(
            self.client.table("reservations").insert(
                {
                    "user_id": str(fields.client_id),
                    "user_name": fields.client_name,
                    "jet_name": fields.vessel_name,
                    "date": fields.date.isoformat(),
                    "time": fields.time,
                    "route": fields.route,
                    "status": VesselStatus.AT_DOCK.value,
                    "photos": [],
                    "client_photos": [],
                }
            ),
            "create reservation",
        )
        if not rows:
            raise CollaboratorFailure("Failed to create reservation")
        return _to_reservation(rows[0])

    def update_reservation(
        self,
        reservation_id: UUID,
        fields: dict[str, object],
        expected_status: VesselStatus | None = None,
    ) -> Reservation:
        """Apply a partial update, guarded by the status the caller last saw."""
        query = (
            self.client.table("reservations")
            .update(_to_row(fields))
            .eq("id", str(reservation_id))
        )
        if expected_status is not None:
            query = query.eq("status", expected_status.value)
        rows = execute(query, "update reservation")
        if not rows:
            raise StaleSnapshotConflict(
                "The reservation changed or was removed. Refresh and try again."
            )
        return _to_reservation(rows[0])

    def delete_reservation(self, reservation_id: UUID) -> None:
        """Delete a reservation row."""
        execute(
            self.client.table("reservations").delete().eq("id", str(reservation_id)),
            "delete reservation",
        )


def _to_row(fields: dict[str, object]) -> dict[str, object]:
    row: dict[str, object] = {}
    for name, value in fields.items():
        if name == "fuel":
            fuel = value if isinstance(value, FuelEvidence) else None
            row["fuel_receipt_url"] = fuel.receipt_url if fuel else None
            row["fuel_payee_name"] = fuel.payee_name if fuel else None
            row["fuel_payee_key"] = fuel.payee_key if fuel else None
            continue
        row[_COLUMN_NAMES.get(name, name)] = format_value(value)
    return row


def _to_reservation(row: dict[str, object]) -> Reservation:
    fuel = None
    if row.get("fuel_receipt_url"):
        fuel = FuelEvidence(
            receipt_url=str(row["fuel_receipt_url"]),
            payee_name=str(row.get("fuel_payee_name") or ""),
            payee_key=str(row.get("fuel_payee_key") or ""),
        )
    return Reservation(
        id=UUID(str(row["id"])),
        client_id=UUID(str(row["user_id"])),
        client_name=str(row.get("user_name") or ""),
        vessel_name=str(row.get("jet_name") or ""),
        date=parse_civil_date(str(row["date"])),
        time=str(row.get("time") or ""),
        route=str(row.get("route") or ""),
        status=VesselStatus(row["status"]),
        photos=tuple(row.get("photos") or ()),
        client_photos=tuple(row.get("client_photos") or ()),
        fuel=fuel,
        created_at=parse_timestamp(row.get("created_at")),
        in_water_at=parse_timestamp(row.get("in_water_at")),
        navigating_at=parse_timestamp(row.get("navigating_at")),
        returned_at=parse_timestamp(row.get("returned_at")),
        checked_in_at=parse_timestamp(row.get("checked_in_at")),
    )
