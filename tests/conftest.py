"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from jet_marina.config import Settings, booking_policy
from jet_marina.containers import AppContainer
from jet_marina.domain.models import (
    Client,
    MaintenanceBlock,
    OwnershipMode,
    Reservation,
    VesselGroup,
    VesselStatus,
)
from jet_marina.domain.vessels import same_vessel
from jet_marina.errors import StaleSnapshotConflict
from jet_marina.services.clients import ClientService, VesselGroupRepository
from jet_marina.services.operations import OperationsService
from jet_marina.services.reservations import (
    ClientRepository,
    MaintenanceRepository,
    NewReservation,
    ReservationRepository,
    ReservationService,
)

# 10:00 in Sao Paulo, well after the daily unlock.
NOW = datetime(2024, 6, 10, 13, 0, tzinfo=UTC)
TODAY = date(2024, 6, 10)


@dataclass
class InMemoryReservationRepository(ReservationRepository):
    """In-memory reservation repository for tests."""

    reservations: dict[UUID, Reservation] = field(default_factory=dict)
    updates: list[tuple[UUID, dict[str, object]]] = field(default_factory=list)
    deleted: list[UUID] = field(default_factory=list)
    failing_ids: set[UUID] = field(default_factory=set)
    _created: int = 0

    def add(self, reservation: Reservation) -> Reservation:
        if reservation.created_at is None:
            reservation = replace(reservation, created_at=self._next_created_at())
        self.reservations[reservation.id] = reservation
        return reservation

    def _next_created_at(self) -> datetime:
        self._created += 1
        return datetime(2024, 1, 1, tzinfo=UTC) + timedelta(minutes=self._created)

    def list_reservations(self, client_id: UUID | None = None) -> list[Reservation]:
        return [
            r
            for r in self.reservations.values()
            if client_id is None or r.client_id == client_id
        ]

    def get_reservation(self, reservation_id: UUID) -> Reservation | None:
        return self.reservations.get(reservation_id)

    def create_reservation(self, fields: NewReservation) -> Reservation:
        return self.add(
            Reservation(
                id=uuid4(),
                client_id=fields.client_id,
                client_name=fields.client_name,
                vessel_name=fields.vessel_name,
                date=fields.date,
                time=fields.time,
                route=fields.route,
            )
        )

    def update_reservation(
        self,
        reservation_id: UUID,
        fields: dict[str, object],
        expected_status: VesselStatus | None = None,
    ) -> Reservation:
        if reservation_id in self.failing_ids:
            raise StaleSnapshotConflict("simulated failure")
        current = self.reservations.get(reservation_id)
        if current is None or (
            expected_status is not None and current.status is not expected_status
        ):
            raise StaleSnapshotConflict("The reservation changed or was removed.")
        updated = replace(current, **fields)
        self.reservations[reservation_id] = updated
        self.updates.append((reservation_id, fields))
        return updated

    def delete_reservation(self, reservation_id: UUID) -> None:
        self.reservations.pop(reservation_id, None)
        self.deleted.append(reservation_id)


@dataclass
class InMemoryMaintenanceRepository(MaintenanceRepository):
    """In-memory maintenance block repository for tests."""

    blocks: dict[UUID, MaintenanceBlock] = field(default_factory=dict)

    def list_blocks(self, vessel_name: str | None = None) -> list[MaintenanceBlock]:
        return [
            b
            for b in self.blocks.values()
            if vessel_name is None or same_vessel(b.vessel_name, vessel_name)
        ]

    def create_block(self, vessel_name: str, day: date) -> MaintenanceBlock:
        block = MaintenanceBlock(id=uuid4(), vessel_name=vessel_name, date=day)
        self.blocks[block.id] = block
        return block

    def delete_block(self, block_id: UUID) -> None:
        self.blocks.pop(block_id, None)


@dataclass
class InMemoryClientRepository(ClientRepository):
    """In-memory client repository for tests."""

    clients: dict[UUID, Client] = field(default_factory=dict)

    def add(self, client: Client) -> Client:
        self.clients[client.id] = client
        return client

    def get_client(self, client_id: UUID) -> Client | None:
        return self.clients.get(client_id)

    def list_clients(self) -> list[Client]:
        return list(self.clients.values())

    def update_client(self, client_id: UUID, fields: dict[str, object]) -> Client:
        updated = replace(self.clients[client_id], **fields)
        self.clients[client_id] = updated
        return updated


@dataclass
class InMemoryVesselGroupRepository(VesselGroupRepository):
    """In-memory vessel group repository for tests."""

    groups: list[VesselGroup] = field(default_factory=list)

    def list_groups(self) -> list[VesselGroup]:
        return list(self.groups)


@dataclass
class FakeNotifier:
    """Notifier that records reservations it was told about."""

    sent: list[Reservation] = field(default_factory=list)
    fail: bool = False

    async def reservation_updated(self, reservation: Reservation) -> None:
        if self.fail:
            raise RuntimeError("webhook down")
        self.sent.append(reservation)

    async def close(self) -> None:
        return None


def shared_client(name: str = "Xavier Costa", vessel: str = "V1") -> Client:
    return Client(
        id=uuid4(), name=name, ownership=OwnershipMode.SHARED, vessel_name=vessel
    )


def sole_client(name: str = "Zelia Prado") -> Client:
    return Client(
        id=uuid4(),
        name=name,
        ownership=OwnershipMode.SOLE,
        vessel_manufacturer="Sea-Doo",
        vessel_model="GTI 130",
        vessel_year="2024",
    )


def make_reservation(  # noqa: PLR0913
    client: Client,
    day: date,
    status: VesselStatus = VesselStatus.AT_DOCK,
    vessel_name: str | None = None,
    time: str = "09:00",
    route: str = "Ilha das Couves",
    **kwargs: object,
) -> Reservation:
    return Reservation(
        id=uuid4(),
        client_id=client.id,
        client_name=client.name,
        vessel_name=(client.vessel_name or "") if vessel_name is None else vessel_name,
        date=day,
        time=time,
        route=route,
        status=status,
        **kwargs,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        staff_token="staff-token",
    )


@pytest.fixture
def reservation_repository() -> InMemoryReservationRepository:
    return InMemoryReservationRepository()


@pytest.fixture
def maintenance_repository() -> InMemoryMaintenanceRepository:
    return InMemoryMaintenanceRepository()


@pytest.fixture
def client_repository() -> InMemoryClientRepository:
    return InMemoryClientRepository()


@pytest.fixture
def vessel_group_repository() -> InMemoryVesselGroupRepository:
    return InMemoryVesselGroupRepository()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def reservation_service(
    settings: Settings,
    reservation_repository: InMemoryReservationRepository,
    maintenance_repository: InMemoryMaintenanceRepository,
    client_repository: InMemoryClientRepository,
) -> ReservationService:
    return ReservationService(
        reservation_repository=reservation_repository,
        maintenance_repository=maintenance_repository,
        client_repository=client_repository,
        policy=booking_policy(settings),
        clock=lambda: NOW,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    reservation_service: ReservationService,
    reservation_repository: InMemoryReservationRepository,
    maintenance_repository: InMemoryMaintenanceRepository,
    client_repository: InMemoryClientRepository,
    vessel_group_repository: InMemoryVesselGroupRepository,
    notifier: FakeNotifier,
) -> AppContainer:
    operations_service = OperationsService(
        reservation_repository=reservation_repository,
        maintenance_repository=maintenance_repository,
        client_repository=client_repository,
    )
    client_service = ClientService(
        client_repository=client_repository,
        vessel_group_repository=vessel_group_repository,
        default_co_owner_limit=settings.default_co_owner_limit,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        reservation_service=reservation_service,
        operations_service=operations_service,
        client_service=client_service,
        notifier=notifier,
        close_resources=close_resources,
    )
