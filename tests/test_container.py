"""Tests for container wiring."""

import asyncio

from jet_marina.adapters.webhook_notifier import HttpxWebhookNotifier, LogNotifier
from jet_marina.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.reservation_service is not None
    assert container.operations_service is not None
    assert container.client_service is not None
    assert isinstance(container.notifier, LogNotifier)
    asyncio.run(container.close_resources())


def test_build_container_uses_webhook_when_configured(settings) -> None:
    settings.notification_webhook_url = "https://hooks.example/marina"
    container = build_container(settings)
    assert isinstance(container.notifier, HttpxWebhookNotifier)
    asyncio.run(container.close_resources())
