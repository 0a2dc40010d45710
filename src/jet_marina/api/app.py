"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from jet_marina.api.schemas import (
    BookingRequest,
    DecisionResponse,
    EvaluateRequest,
    FuelAttachmentResponse,
    FuelReceiptRequest,
    PhotosRequest,
    ReservationResponse,
)
from jet_marina.api.staff import router as staff_router
from jet_marina.app_logging import configure_logging
from jet_marina.containers import AppContainer
from jet_marina.domain.decisions import DenialReason
from jet_marina.domain.models import FuelEvidence
from jet_marina.errors import (
    CollaboratorFailure,
    NotFound,
    StaleSnapshotConflict,
    ValidationDenied,
)

# Denials about who is acting rather than what was asked.
_FORBIDDEN_REASONS = {
    DenialReason.STAFF_ONLY,
    DenialReason.NOT_OWNER,
    DenialReason.CLIENT_BLOCKED,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(staff_router)

    @app.exception_handler(ValidationDenied)
    async def validation_denied(_: Request, exc: ValidationDenied) -> JSONResponse:
        status_code = (
            status.HTTP_403_FORBIDDEN
            if exc.denial.reason in _FORBIDDEN_REASONS
            else status.HTTP_409_CONFLICT
        )
        return JSONResponse(
            status_code=status_code,
            content=DecisionResponse.from_decision(exc.denial).model_dump(),
        )

    @app.exception_handler(StaleSnapshotConflict)
    async def stale_snapshot(_: Request, exc: StaleSnapshotConflict) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "allowed": False,
                "reason": "stale_snapshot",
                "message": str(exc),
                "conflicting_client_name": exc.conflicting_client_name,
            },
        )

    @app.exception_handler(CollaboratorFailure)
    async def collaborator_failure(
        request: Request, exc: CollaboratorFailure
    ) -> JSONResponse:
        logger.error(
            "Collaborator failure", exc_info=exc, extra={"path": request.url.path}
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "reason": "collaborator_failure",
                "message": _error_detail(request.app.state.container, exc),
            },
        )

    @app.exception_handler(NotFound)
    async def not_found(_: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"reason": "not_found", "message": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/clients/{client_id}/reservations")
    async def list_reservations(
        client_id: UUID, request: Request
    ) -> dict[str, object]:
        """Return the client's reservations, latest first."""
        service = request.app.state.container.reservation_service
        reservations = service.list_reservations(client_id)
        return {
            "reservations": [
                ReservationResponse.from_domain(r).model_dump(mode="json")
                for r in reservations
            ]
        }

    @app.get("/clients/{client_id}/blocked-dates")
    async def blocked_dates(client_id: UUID, request: Request) -> dict[str, list[str]]:
        """Dates the calendar should render as unavailable."""
        service = request.app.state.container.reservation_service
        dates = sorted(service.blocked_dates(client_id))
        return {"dates": [day.isoformat() for day in dates]}

    @app.get("/clients/{client_id}/calendar")
    async def calendar(
        client_id: UUID, request: Request, year: int, month: int
    ) -> dict[str, list[str]]:
        """Dates of a month the client could book right now."""
        service = request.app.state.container.reservation_service
        dates = service.calendar(client_id, year, month)
        return {"selectable": [day.isoformat() for day in dates]}

    @app.post("/clients/{client_id}/reservations/evaluate")
    async def evaluate(
        client_id: UUID, payload: EvaluateRequest, request: Request
    ) -> DecisionResponse:
        """Check a date without booking it; reservation_id pre-checks a reschedule."""
        service = request.app.state.container.reservation_service
        decision = service.evaluate(
            client_id, payload.date, exclude_reservation_id=payload.reservation_id
        )
        return DecisionResponse.from_decision(decision)

    @app.post(
        "/clients/{client_id}/reservations", status_code=status.HTTP_201_CREATED
    )
    async def book(
        client_id: UUID, payload: BookingRequest, request: Request
    ) -> ReservationResponse:
        """Book the client's vessel for a date."""
        service = request.app.state.container.reservation_service
        reservation = service.book(
            client_id, payload.date, payload.time.strip(), payload.route.strip()
        )
        return ReservationResponse.from_domain(reservation)

    @app.patch("/clients/{client_id}/reservations/{reservation_id}")
    async def reschedule(
        client_id: UUID,
        reservation_id: UUID,
        payload: BookingRequest,
        request: Request,
    ) -> ReservationResponse:
        """Change date, time or route while the vessel is still at the dock."""
        service = request.app.state.container.reservation_service
        reservation = service.reschedule(
            client_id,
            reservation_id,
            payload.date,
            payload.time.strip(),
            payload.route.strip(),
        )
        return ReservationResponse.from_domain(reservation)

    @app.delete(
        "/clients/{client_id}/reservations/{reservation_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def cancel(client_id: UUID, reservation_id: UUID, request: Request) -> None:
        """Delete a reservation that has not left the dock."""
        service = request.app.state.container.reservation_service
        client = service.get_client(client_id)
        service.cancel(client.actor, reservation_id)

    @app.post("/clients/{client_id}/reservations/{reservation_id}/photos")
    async def attach_photos(
        client_id: UUID,
        reservation_id: UUID,
        payload: PhotosRequest,
        request: Request,
    ) -> ReservationResponse:
        """Attach trip photos while the vessel is in the water."""
        service = request.app.state.container.reservation_service
        reservation = service.attach_client_photos(
            client_id, reservation_id, payload.photos
        )
        return ReservationResponse.from_domain(reservation)

    @app.post("/clients/{client_id}/reservations/{reservation_id}/fuel")
    async def attach_fuel(
        client_id: UUID,
        reservation_id: UUID,
        payload: FuelReceiptRequest,
        request: Request,
    ) -> FuelAttachmentResponse:
        """Attach a fuel receipt and forward it to the previous renter."""
        service = request.app.state.container.reservation_service
        reservation, result = service.attach_fuel_receipt(
            client_id,
            reservation_id,
            FuelEvidence(
                receipt_url=payload.receipt_url,
                payee_name=payload.payee_name,
                payee_key=payload.payee_key,
            ),
        )
        return FuelAttachmentResponse.build(reservation, result)

    return app


def _error_detail(container: AppContainer, exc: Exception) -> str:
    """Return a user-facing error message with local debug info."""
    fallback = "The reservation service is unavailable. Please try again."
    if container.settings.environment == "local":
        return f"{fallback} (debug: {exc})"
    return fallback
