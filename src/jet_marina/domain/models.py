"""Domain models for marina reservations."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID


class OwnershipMode(str, Enum):
    """How a client holds their vessel."""

    SHARED = "COTISTA"
    SOLE = "UNICO"


class UserRole(str, Enum):
    """Role of an account in the marina system."""

    CLIENT = "CLIENT"
    MARINA = "MARINA"
    OPERATIONAL = "OPERATIONAL"

    @property
    def is_staff(self) -> bool:
        return self is not UserRole.CLIENT


class VesselStatus(str, Enum):
    """Lifecycle of a reservation, in strict forward order."""

    # Stored as IN_DOCK for compatibility with existing rows.
    AT_DOCK = "IN_DOCK"
    IN_WATER = "IN_WATER"
    NAVIGATING = "NAVIGATING"
    RETURNED = "RETURNED"
    CHECKED_IN = "CHECKED_IN"

    @property
    def position(self) -> int:
        return _STATUS_ORDER.index(self)

    @property
    def is_terminal(self) -> bool:
        return self is VesselStatus.CHECKED_IN

    @property
    def next(self) -> "VesselStatus | None":
        """Return the only status this one may advance to."""
        if self.is_terminal:
            return None
        return _STATUS_ORDER[self.position + 1]

    def is_before(self, other: "VesselStatus") -> bool:
        return self.position < other.position


_STATUS_ORDER: tuple[VesselStatus, ...] = (
    VesselStatus.AT_DOCK,
    VesselStatus.IN_WATER,
    VesselStatus.NAVIGATING,
    VesselStatus.RETURNED,
    VesselStatus.CHECKED_IN,
)

STATUS_LABELS: dict[VesselStatus, str] = {
    VesselStatus.AT_DOCK: "Jet-ski na vaga",
    VesselStatus.IN_WATER: "Jet-ski na água",
    VesselStatus.NAVIGATING: "Jet-ski navegando",
    VesselStatus.RETURNED: "Jet-ski retornou",
    VesselStatus.CHECKED_IN: "Check-in e fotos do jet",
}

# Stand-in for a missing created_at so sort keys stay comparable.
UNKNOWN_CREATED_AT = datetime.min.replace(tzinfo=UTC)

# Column that records the moment a reservation entered each status.
TRANSITION_TIMESTAMP_FIELDS: dict[VesselStatus, str] = {
    VesselStatus.IN_WATER: "in_water_at",
    VesselStatus.NAVIGATING: "navigating_at",
    VesselStatus.RETURNED: "returned_at",
    VesselStatus.CHECKED_IN: "checked_in_at",
}


@dataclass(frozen=True)
class Actor:
    """Whoever is asking for an operation."""

    id: UUID
    role: UserRole

    @property
    def is_staff(self) -> bool:
        return self.role.is_staff


@dataclass(frozen=True)
class Client:
    """Client profile as returned by the profile collaborator."""

    id: UUID
    name: str
    ownership: OwnershipMode
    vessel_name: str | None = None
    vessel_manufacturer: str | None = None
    vessel_model: str | None = None
    vessel_year: str | None = None
    is_blocked: bool = False
    role: UserRole = UserRole.CLIENT

    @property
    def actor(self) -> Actor:
        return Actor(id=self.id, role=self.role)


@dataclass(frozen=True)
class FuelEvidence:
    """Fuel receipt attached by a client for reimbursement."""

    receipt_url: str
    payee_name: str
    payee_key: str


@dataclass(frozen=True)
class Reservation:
    """One scheduled outing for a vessel."""

    id: UUID
    client_id: UUID
    client_name: str
    vessel_name: str
    date: date
    time: str
    route: str
    status: VesselStatus = VesselStatus.AT_DOCK
    photos: tuple[str, ...] = ()
    client_photos: tuple[str, ...] = ()
    fuel: FuelEvidence | None = None
    created_at: datetime | None = None
    in_water_at: datetime | None = None
    navigating_at: datetime | None = None
    returned_at: datetime | None = None
    checked_in_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def timestamps(self) -> list[datetime]:
        """Return the transition timestamps that are set, in lifecycle order."""
        stamps = [
            getattr(self, column) for column in TRANSITION_TIMESTAMP_FIELDS.values()
        ]
        return [stamp for stamp in stamps if stamp is not None]


@dataclass(frozen=True)
class MaintenanceBlock:
    """A date on which a shared vessel cannot be booked."""

    id: UUID
    vessel_name: str
    date: date
    created_at: datetime | None = None


@dataclass(frozen=True)
class VesselGroup:
    """A shared vessel and the cap on how many co-owners it accepts."""

    id: UUID
    vessel_name: str
    manufacturer: str | None
    model: str | None
    year: str | None
    max_co_owners: int


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time view of reservations and maintenance blocks."""

    reservations: tuple[Reservation, ...] = ()
    maintenance_blocks: tuple[MaintenanceBlock, ...] = ()
    clients: tuple[Client, ...] = ()

    def without(self, reservation_id: UUID | None) -> "Snapshot":
        """Return a snapshot that ignores one reservation."""
        if reservation_id is None:
            return self
        return Snapshot(
            reservations=tuple(
                r for r in self.reservations if r.id != reservation_id
            ),
            maintenance_blocks=self.maintenance_blocks,
            clients=self.clients,
        )
