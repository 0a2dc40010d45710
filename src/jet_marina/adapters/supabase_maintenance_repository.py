"""Supabase-backed maintenance block repository."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from jet_marina.adapters.supabase_support import execute, parse_timestamp
from jet_marina.domain.dates import parse_civil_date
from jet_marina.domain.models import MaintenanceBlock
from jet_marina.domain.vessels import same_vessel
from jet_marina.errors import CollaboratorFailure
from jet_marina.services.reservations import MaintenanceRepository


@dataclass
class SupabaseMaintenanceRepository(MaintenanceRepository):
    """Supabase implementation for maintenance blocks."""

    client: Client

    def list_blocks(self, vessel_name: str | None = None) -> list[MaintenanceBlock]:
        """Return blocks, matching vessel names case- and whitespace-insensitively."""
        rows = execute(
            self.client.table("maintenance_blocks")
            .select("id, jet_name, date, created_at")
            .order("date"),
            "fetch maintenance blocks",
        )
        blocks = [_to_block(row) for row in rows]
        if vessel_name is None:
            return blocks
        return [b for b in blocks if same_vessel(b.vessel_name, vessel_name)]

    def create_block(self, vessel_name: str, day: date) -> MaintenanceBlock:
        rows = execute(
            self.client.table("maintenance_blocks").insert(
                {"jet_name": vessel_name, "date": day.isoformat()}
            ),
            "create maintenance block",
        )
        if not rows:
            raise CollaboratorFailure("Failed to create maintenance block")
        return _to_block(rows[0])

    def delete_block(self, block_id: UUID) -> None:
        execute(
            self.client.table("maintenance_blocks").delete().eq("id", str(block_id)),
            "delete maintenance block",
        )


def _to_block(row: dict[str, object]) -> MaintenanceBlock:
    return MaintenanceBlock(
        id=UUID(str(row["id"])),
        vessel_name=str(row.get("jet_name") or ""),
        date=parse_civil_date(str(row["date"])),
        created_at=parse_timestamp(row.get("created_at")),
    )
