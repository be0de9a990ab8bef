from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from services.billing_service.app.config import Settings
from services.billing_service.app.plans import annual_plan, monthly_plan
from services.billing_service.app.service import BillingService
from services.billing_service.app.subscribers import Subscriber

START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(service_name="billing-service-tests", log_json=False)


@pytest.fixture
def service(settings: Settings, clock: FakeClock) -> BillingService:
    return BillingService(settings, clock=clock)


@pytest.fixture
def basic_plan():
    return monthly_plan(1, "Basic Monthly", 500, ["Feature A", "Feature B"], 7)


@pytest.fixture
def premium_plan():
    return annual_plan(2, "Premium Annual", 1000, ["Feature X", "Feature Y", "Feature Z"], 14)


@pytest.fixture
def alice(service: BillingService, basic_plan) -> Subscriber:
    service.register_plan(basic_plan)
    return service.register_subscriber(Subscriber.on_plan(101, "Alice", "alice@mail.com", basic_plan))


@pytest.fixture
def bob(service: BillingService, premium_plan) -> Subscriber:
    service.register_plan(premium_plan)
    return service.register_subscriber(Subscriber.on_plan(102, "Bob", "bob@mail.com", premium_plan))
