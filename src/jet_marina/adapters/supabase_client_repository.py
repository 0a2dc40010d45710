"""Supabase-backed client profile and vessel group repositories."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client as SupabaseClient

from jet_marina.adapters.supabase_support import execute, format_value
from jet_marina.domain.models import Client, OwnershipMode, UserRole, VesselGroup
from jet_marina.errors import StaleSnapshotConflict
from jet_marina.services.clients import VesselGroupRepository
from jet_marina.services.reservations import ClientRepository

_COLUMNS = (
    "id, name, owner_type, jet_name, jet_ski_manufacturer, jet_ski_model, "
    "jet_ski_year, is_blocked, role"
)

_COLUMN_NAMES = {
    "ownership": "owner_type",
    "vessel_name": "jet_name",
    "vessel_manufacturer": "jet_ski_manufacturer",
    "vessel_model": "jet_ski_model",
    "vessel_year": "jet_ski_year",
}


@dataclass
class SupabaseClientRepository(ClientRepository):
    """Supabase implementation for client profiles."""

    client: SupabaseClient

    def get_client(self, client_id: UUID) -> Client | None:
        rows = execute(
            self.client.table("users")
            .select(_COLUMNS)
            .eq("id", str(client_id))
            .limit(1),
            "fetch client profile",
        )
        return _to_client(rows[0]) if rows else None

    def list_clients(self) -> list[Client]:
        rows = execute(
            self.client.table("users").select(_COLUMNS).eq("role", UserRole.CLIENT.value),
            "fetch clients",
        )
        return [_to_client(row) for row in rows]

    def update_client(self, client_id: UUID, fields: dict[str, object]) -> Client:
        payload = {
            _COLUMN_NAMES.get(name, name): format_value(value)
            for name, value in fields.items()
        }
        rows = execute(
            self.client.table("users").update(payload).eq("id", str(client_id)),
            "update client profile",
        )
        if not rows:
            raise StaleSnapshotConflict("The client profile no longer exists.")
        return _to_client(rows[0])


@dataclass
class SupabaseVesselGroupRepository(VesselGroupRepository):
    """Supabase implementation for shared vessel groups."""

    client: SupabaseClient

    def list_groups(self) -> list[VesselGroup]:
        rows = execute(
            self.client.table("jet_groups")
            .select("id, jet_name, manufacturer, model, year, max_cotistas")
            .order("jet_name"),
            "fetch vessel groups",
        )
        return [
            VesselGroup(
                id=UUID(str(row["id"])),
                vessel_name=str(row["jet_name"]),
                manufacturer=row.get("manufacturer"),
                model=row.get("model"),
                year=row.get("year"),
                max_co_owners=int(row.get("max_cotistas") or 0),
            )
            for row in rows
        ]


def _to_client(row: dict[str, object]) -> Client:
    return Client(
        id=UUID(str(row["id"])),
        name=str(row.get("name") or ""),
        ownership=OwnershipMode(row.get("owner_type") or OwnershipMode.SOLE.value),
        vessel_name=row.get("jet_name") or None,
        vessel_manufacturer=row.get("jet_ski_manufacturer") or None,
        vessel_model=row.get("jet_ski_model") or None,
        vessel_year=row.get("jet_ski_year") or None,
        is_blocked=bool(row.get("is_blocked")),
        role=UserRole(row.get("role") or UserRole.CLIENT.value),
    )
