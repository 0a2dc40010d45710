"""Shared helpers for Supabase adapters."""

from datetime import datetime
from typing import Any

from postgrest.exceptions import APIError

from jet_marina.errors import CollaboratorFailure


def execute(query: Any, action: str) -> list[dict[str, Any]]:  # noqa: ANN401
    """Run a query builder and return its rows, translating client errors."""
    try:
        response = query.execute()
    except APIError as exc:
        raise CollaboratorFailure(f"Failed to {action}: {exc.message}") from exc
    return list(response.data or [])


def parse_timestamp(value: object) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def format_value(value: object) -> object:
    """Convert domain values into JSON-friendly column values."""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, tuple):
        return list(value)
    if hasattr(value, "value"):
        return value.value
    return value
