"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

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
from jet_marina.adapters.webhook_notifier import (
    HttpxWebhookNotifier,
    LogNotifier,
    Notifier,
)
from jet_marina.config import Settings, booking_policy
from jet_marina.services.clients import ClientService
from jet_marina.services.operations import OperationsService
from jet_marina.services.reservations import ReservationService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    reservation_service: ReservationService
    operations_service: OperationsService
    client_service: ClientService
    notifier: Notifier
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    reservation_repository = SupabaseReservationRepository(supabase_client)
    maintenance_repository = SupabaseMaintenanceRepository(supabase_client)
    client_repository = SupabaseClientRepository(supabase_client)
    vessel_group_repository = SupabaseVesselGroupRepository(supabase_client)
    reservation_service = ReservationService(
        reservation_repository=reservation_repository,
        maintenance_repository=maintenance_repository,
        client_repository=client_repository,
        policy=booking_policy(resolved_settings),
    )
    operations_service = OperationsService(
        reservation_repository=reservation_repository,
        maintenance_repository=maintenance_repository,
        client_repository=client_repository,
    )
    client_service = ClientService(
        client_repository=client_repository,
        vessel_group_repository=vessel_group_repository,
        default_co_owner_limit=resolved_settings.default_co_owner_limit,
    )
    notifier: HttpxWebhookNotifier | LogNotifier
    if resolved_settings.notification_webhook_url:
        notifier = HttpxWebhookNotifier.create(
            resolved_settings.notification_webhook_url
        )
    else:
        notifier = LogNotifier()

    async def close_resources() -> None:
        await notifier.close()

    return AppContainer(
        settings=resolved_settings,
        reservation_service=reservation_service,
        operations_service=operations_service,
        client_service=client_service,
        notifier=notifier,
        close_resources=close_resources,
    )
