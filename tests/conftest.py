import os
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from moto import mock_aws

# Fake credentials so no test can reach a real account
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

from infra_setup import TABLES, create_table  # noqa: E402
from laundry import services  # noqa: E402
from laundry.feed import ChangeFeed  # noqa: E402
from laundry.policy import Principal  # noqa: E402
from laundry.services import LaundryService  # noqa: E402
from laundry.store import LaundryStore  # noqa: E402


class StepClock:
    """Deterministic clock: every call is one second after the last."""

    def __init__(self, start=None):
        self.current = start or datetime(2025, 10, 18, 9, 0, tzinfo=dt_timezone.utc)

    def __call__(self):
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def aws():
    with mock_aws():
        for table_name, key in TABLES.items():
            create_table(table_name, key)
        yield


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def store(aws):
    return LaundryStore()


@pytest.fixture
def service(store, feed, clock, monkeypatch):
    svc = LaundryService(store, feed, clock=clock)
    # Views and signals pick up this instance through get_service()
    monkeypatch.setattr(services, "_service", svc)
    return svc


@pytest.fixture
def customer():
    return Principal(user_id="customer-1")


@pytest.fixture
def other_customer():
    return Principal(user_id="customer-2")


@pytest.fixture
def admin():
    return Principal(user_id="admin-1", is_admin=True)
