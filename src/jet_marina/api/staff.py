"""Staff API endpoints with simple token auth."""

from __future__ import annotations

import logging
from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from fastapi import (
    APIRouter,
    Depends,
    Header,
    HTTPException,
    Query,
    Request,
    status,
)

from jet_marina.api.schemas import (
    BlockRequest,
    MaintenanceRequest,
    ReservationResponse,
    TransitionRequest,
    VesselAssignmentRequest,
    board_payload,
    conflict_payload,
)
from jet_marina.domain.models import Actor, UserRole, VesselStatus

if TYPE_CHECKING:
    from jet_marina.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/staff", tags=["staff"])


def _get_staff_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.staff_token


async def require_staff(
    x_staff_token: str | None = Header(default=None),
    staff_token: str = Depends(_get_staff_token),
) -> None:
    """Ensure requests include a valid staff token."""
    if not x_staff_token or x_staff_token != staff_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def staff_actor(
    x_staff_id: UUID | None = Header(default=None),
) -> Actor:
    """Identify the staff member acting; anonymous tokens act as the marina."""
    return Actor(id=x_staff_id or uuid4(), role=UserRole.MARINA)


@router.get("/board", dependencies=[Depends(require_staff)])
async def board(
    request: Request, day: date | None = Query(default=None, alias="date")
) -> dict[str, object]:
    """Return the operations board for a day (today by default)."""
    container: AppContainer = request.app.state.container
    selected = day or container.reservation_service.booking_clock().today
    columns = container.operations_service.board(selected)
    return {"date": selected.isoformat(), "columns": board_payload(columns)}


@router.get("/conflicts", dependencies=[Depends(require_staff)])
async def conflicts(request: Request) -> dict[str, object]:
    """Return shared-vessel dates held by more than one active reservation."""
    container: AppContainer = request.app.state.container
    return {"conflicts": conflict_payload(container.operations_service.conflicts())}


@router.post(
    "/reservations/{reservation_id}/transition",
    dependencies=[Depends(require_staff)],
)
async def transition(
    reservation_id: UUID,
    payload: TransitionRequest,
    request: Request,
    actor: Actor = Depends(staff_actor),
) -> ReservationResponse:
    """Advance a reservation one step along the vessel lifecycle."""
    container: AppContainer = request.app.state.container
    reservation = container.reservation_service.advance_status(
        actor, reservation_id, payload.status, payload.photos
    )
    if reservation.status is VesselStatus.CHECKED_IN:
        try:
            await container.notifier.reservation_updated(reservation)
        except Exception:
            logger.exception(
                "Failed to notify client",
                extra={"reservation_id": str(reservation.id)},
            )
    return ReservationResponse.from_domain(reservation)


@router.delete(
    "/reservations/{reservation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_staff)],
)
async def delete_reservation(
    reservation_id: UUID, request: Request, actor: Actor = Depends(staff_actor)
) -> None:
    """Delete a reservation at any status."""
    container: AppContainer = request.app.state.container
    container.reservation_service.cancel(actor, reservation_id)


@router.get("/maintenance", dependencies=[Depends(require_staff)])
async def list_maintenance(
    request: Request, vessel_name: str | None = None
) -> dict[str, object]:
    """Return maintenance blocks, optionally for one vessel."""
    container: AppContainer = request.app.state.container
    blocks = container.operations_service.list_maintenance(vessel_name)
    return {
        "blocks": [
            {
                "id": str(block.id),
                "vessel_name": block.vessel_name,
                "date": block.date.isoformat(),
            }
            for block in blocks
        ]
    }


@router.post(
    "/maintenance",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_staff)],
)
async def add_maintenance(
    payload: MaintenanceRequest, request: Request
) -> dict[str, str]:
    """Block a date for a shared vessel."""
    container: AppContainer = request.app.state.container
    block = container.operations_service.add_maintenance(
        payload.vessel_name, payload.date
    )
    return {
        "id": str(block.id),
        "vessel_name": block.vessel_name,
        "date": block.date.isoformat(),
    }


@router.delete(
    "/maintenance/{block_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_staff)],
)
async def remove_maintenance(block_id: UUID, request: Request) -> None:
    """Remove a maintenance block."""
    container: AppContainer = request.app.state.container
    container.operations_service.remove_maintenance(block_id)


@router.post("/clients/{client_id}/block", dependencies=[Depends(require_staff)])
async def set_blocked(
    client_id: UUID, payload: BlockRequest, request: Request
) -> dict[str, object]:
    """Place or lift an administrative hold on a client."""
    container: AppContainer = request.app.state.container
    client = container.client_service.set_blocked(client_id, payload.blocked)
    return {"id": str(client.id), "is_blocked": client.is_blocked}


@router.post("/clients/{client_id}/vessel", dependencies=[Depends(require_staff)])
async def assign_vessel(
    client_id: UUID, payload: VesselAssignmentRequest, request: Request
) -> dict[str, object]:
    """Make a client a co-owner of a shared vessel."""
    container: AppContainer = request.app.state.container
    client = container.client_service.assign_shared_vessel(
        client_id, payload.vessel_name
    )
    return {
        "id": str(client.id),
        "ownership": client.ownership.value,
        "vessel_name": client.vessel_name,
    }
