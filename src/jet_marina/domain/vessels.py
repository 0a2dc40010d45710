"""Vessel name matching and co-owner capacity rules."""

from collections.abc import Iterable

from jet_marina.domain.models import Client, OwnershipMode, VesselGroup


def normalize_vessel_name(name: str | None) -> str:
    """Return the comparison key for a vessel name."""
    if not name:
        return ""
    return " ".join(name.split()).casefold()


def same_vessel(left: str | None, right: str | None) -> bool:
    """True when both names refer to the same assigned vessel."""
    key = normalize_vessel_name(left)
    return bool(key) and key == normalize_vessel_name(right)


def co_owner_limit(
    vessel_name: str, groups: Iterable[VesselGroup], default_limit: int
) -> int:
    """Return the co-owner cap for a vessel, falling back to the default."""
    for group in groups:
        if same_vessel(group.vessel_name, vessel_name) and group.max_co_owners > 0:
            return group.max_co_owners
    return default_limit


def count_co_owners(
    vessel_name: str, clients: Iterable[Client], exclude: Client | None = None
) -> int:
    """Count shared owners assigned to a vessel."""
    return sum(
        1
        for client in clients
        if client.ownership is OwnershipMode.SHARED
        and same_vessel(client.vessel_name, vessel_name)
        and (exclude is None or client.id != exclude.id)
    )


def shared_vessel_names(clients: Iterable[Client]) -> set[str]:
    """Return the normalized names of every vessel held by co-owners."""
    return {
        normalize_vessel_name(client.vessel_name)
        for client in clients
        if client.ownership is OwnershipMode.SHARED and client.vessel_name
    }
