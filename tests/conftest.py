"""Shared fakes for webhook and restore tests."""
from __future__ import annotations

import pytest

from src.api.app import app
from src.core.config import Settings, get_settings
from src.services.email_guard import get_restore_scheduler
from src.services.shopify import CustomerApiError, get_customer_client

SECRET = "test-webhook-secret"


class FakeCustomerClient:
    """Records customer API calls; `events` is shared with other recorders to check ordering."""

    def __init__(self, events: list | None = None, fail: bool = False) -> None:
        self.events = events if events is not None else []
        self.fail = fail
        self.updates: list[tuple] = []
        self.fetches: list = []

    def get_customer(self, customer_id):
        self.fetches.append(customer_id)
        return {"id": customer_id, "email": "current@example.com"}

    def update_customer_email(self, customer_id, email):
        self.events.append("update_customer_email")
        self.updates.append((customer_id, email))
        if self.fail:
            raise CustomerApiError("store unavailable", status_code=503)
        return {"id": customer_id, "email": email}


class RecordingScheduler:
    def __init__(self) -> None:
        self.tasks: list = []
        self.clients: list = []

    def schedule(self, task, client=None):
        self.tasks.append(task)
        self.clients.append(client)
        return f"job-{len(self.tasks)}"

    def pending_count(self) -> int:
        return len(self.tasks)

    def shutdown(self) -> None:
        pass


def make_settings(**overrides) -> Settings:
    values = {
        "environment": "production",
        "webhook_secret": SECRET,
        "shopify_shop": "guard-test.myshopify.com",
        "shopify_api_token": "shpat_test",
        "restore_delay_seconds": 8,
        "allow_unverified_webhooks": False,
        "fetch_customer_before_suppress": False,
        "restore_backend": "memory",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def customer_client():
    return FakeCustomerClient()


@pytest.fixture
def restore_scheduler():
    return RecordingScheduler()


@pytest.fixture
def override_app(customer_client, restore_scheduler):
    """Wire fakes into the app; returns a function to swap in different settings."""

    current = {"settings": make_settings()}
    app.dependency_overrides[get_settings] = lambda: current["settings"]
    app.dependency_overrides[get_customer_client] = lambda: customer_client
    app.dependency_overrides[get_restore_scheduler] = lambda: restore_scheduler

    def use_settings(**overrides) -> Settings:
        current["settings"] = make_settings(**overrides)
        return current["settings"]

    yield use_settings
    app.dependency_overrides.clear()
