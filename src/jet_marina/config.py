"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from jet_marina.domain.dates import parse_cutoff
from jet_marina.services.reservations import BookingPolicy

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    staff_token: str
    marina_timezone: str = "America/Sao_Paulo"
    daily_unlock_time: str = "00:01"
    client_photo_limit: int = 6
    checkin_photo_limit: int = 10
    default_co_owner_limit: int = 10
    notification_webhook_url: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def booking_policy(settings: Settings) -> BookingPolicy:
    """Build the booking policy from settings."""
    return BookingPolicy(
        timezone_name=settings.marina_timezone,
        unlock_time=parse_cutoff(settings.daily_unlock_time),
        client_photo_limit=settings.client_photo_limit,
        checkin_photo_limit=settings.checkin_photo_limit,
    )
