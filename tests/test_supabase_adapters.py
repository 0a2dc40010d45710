"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import uuid4

import pytest
from postgrest.exceptions import APIError

from jet_marina.adapters.supabase_client_repository import (
    SupabaseClientRepository,
    SupabaseVesselGroupRepository,
)
from jet_marina.adapters.supabase_maintenance_repository import (
    SupabaseMaintenanceRepository,
)
from jet_marina.adapters.supabase_reservation_repository import (
    SupabaseReservationRepository,
)
from jet_marina.domain.models import FuelEvidence, OwnershipMode, VesselStatus
from jet_marina.errors import CollaboratorFailure, StaleSnapshotConflict
from jet_marina.services.reservations import NewReservation


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    error: APIError | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _reservation_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": str(uuid4()),
        "user_id": str(uuid4()),
        "user_name": "Xavier Costa",
        "jet_name": "V1",
        "date": "2024-06-12",
        "time": "09:00",
        "route": "Ilhabela",
        "status": "IN_DOCK",
        "photos": None,
        "client_photos": [],
        "created_at": "2024-06-01T12:00:00+00:00",
    }
    row.update(overrides)
    return row


def test_supabase_reservation_repository_create_and_fetch() -> None:
    client = FakeSupabaseClient()
    table = client.table("reservations")
    row = _reservation_row()
    table.queue("insert", [row])
    table.queue("select", [row])

    repository = SupabaseReservationRepository(client)
    created = repository.create_reservation(
        NewReservation(
            client_id=uuid4(),
            client_name="Xavier Costa",
            vessel_name="V1",
            date=date(2024, 6, 12),
            time="09:00",
            route="Ilhabela",
        )
    )
    fetched = repository.get_reservation(created.id)

    assert isinstance(table.last_payload, dict)
    assert table.last_payload["status"] == "IN_DOCK"
    assert created.status is VesselStatus.AT_DOCK
    assert created.date == date(2024, 6, 12)
    assert created.created_at == datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
    assert fetched == created


def test_supabase_reservation_update_guards_on_status() -> None:
    client = FakeSupabaseClient()
    table = client.table("reservations")
    stamp = datetime(2024, 6, 12, 12, 0, tzinfo=UTC)
    table.queue(
        "update",
        [_reservation_row(status="IN_WATER", in_water_at=stamp.isoformat())],
    )

    repository = SupabaseReservationRepository(client)
    updated = repository.update_reservation(
        uuid4(),
        {"status": VesselStatus.IN_WATER, "in_water_at": stamp},
        expected_status=VesselStatus.AT_DOCK,
    )

    assert updated.in_water_at == stamp
    assert table.last_payload == {
        "status": "IN_WATER",
        "in_water_at": stamp.isoformat(),
    }
    assert ("status", "IN_DOCK") in table.last_filters


def test_supabase_reservation_update_without_match_is_stale() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseReservationRepository(client)

    with pytest.raises(StaleSnapshotConflict):
        repository.update_reservation(
            uuid4(),
            {"status": VesselStatus.IN_WATER},
            expected_status=VesselStatus.AT_DOCK,
        )


def test_supabase_reservation_fuel_columns() -> None:
    client = FakeSupabaseClient()
    table = client.table("reservations")
    table.queue(
        "update",
        [
            _reservation_row(
                status="NAVIGATING",
                fuel_receipt_url="https://cdn.example/r.jpg",
                fuel_payee_name="Ana Souza",
                fuel_payee_key="ana@pix",
            )
        ],
    )
    evidence = FuelEvidence("https://cdn.example/r.jpg", "Ana Souza", "ana@pix")

    repository = SupabaseReservationRepository(client)
    updated = repository.update_reservation(uuid4(), {"fuel": evidence})

    assert updated.fuel == evidence
    assert table.last_payload == {
        "fuel_receipt_url": "https://cdn.example/r.jpg",
        "fuel_payee_name": "Ana Souza",
        "fuel_payee_key": "ana@pix",
    }


def test_supabase_errors_become_collaborator_failures() -> None:
    client = FakeSupabaseClient()
    client.table("reservations").error = APIError(
        {"message": "connection reset", "code": "500", "hint": None, "details": None}
    )

    repository = SupabaseReservationRepository(client)

    with pytest.raises(CollaboratorFailure, match="connection reset"):
        repository.list_reservations()


def test_supabase_maintenance_repository_matches_vessel_names() -> None:
    client = FakeSupabaseClient()
    table = client.table("maintenance_blocks")
    table.queue(
        "select",
        [
            {"id": str(uuid4()), "jet_name": "GTI  170", "date": "2024-06-15"},
            {"id": str(uuid4()), "jet_name": "Other", "date": "2024-06-16"},
        ],
    )
    table.queue(
        "insert", [{"id": str(uuid4()), "jet_name": "GTI 170", "date": "2024-06-20"}]
    )

    repository = SupabaseMaintenanceRepository(client)
    blocks = repository.list_blocks("gti 170")
    created = repository.create_block("GTI 170", date(2024, 6, 20))

    assert [block.date for block in blocks] == [date(2024, 6, 15)]
    assert created.date == date(2024, 6, 20)
    assert table.last_payload == {"jet_name": "GTI 170", "date": "2024-06-20"}


def test_supabase_client_repository() -> None:
    client = FakeSupabaseClient()
    users_table = client.table("users")
    client_id = str(uuid4())
    row = {
        "id": client_id,
        "name": "Xavier Costa",
        "owner_type": "COTISTA",
        "jet_name": "V1",
        "is_blocked": False,
        "role": "CLIENT",
    }
    users_table.queue("select", [row])
    users_table.queue("update", [{**row, "is_blocked": True}])

    repository = SupabaseClientRepository(client)
    fetched = repository.get_client(uuid4())
    assert fetched is not None
    updated = repository.update_client(fetched.id, {"is_blocked": True})

    assert fetched.ownership is OwnershipMode.SHARED
    assert fetched.vessel_name == "V1"
    assert updated.is_blocked
    assert users_table.last_payload == {"is_blocked": True}


def test_supabase_vessel_group_repository() -> None:
    client = FakeSupabaseClient()
    client.table("jet_groups").queue(
        "select",
        [
            {
                "id": str(uuid4()),
                "jet_name": "V1",
                "manufacturer": "Sea-Doo",
                "model": "GTI 170",
                "year": "2023",
                "max_cotistas": 4,
            }
        ],
    )

    repository = SupabaseVesselGroupRepository(client)
    groups = repository.list_groups()

    assert groups[0].max_co_owners == 4
