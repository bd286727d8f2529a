"""
Shared pytest fixtures for eligibility tracker tests.
"""
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from cooldowns import CooldownPolicy
from main import create_app
from seed import seed_store
from store import BillingRecordStore

# Fixed reference day so every elapsed-days figure is deterministic
TODAY = date(2026, 3, 1)
AS_OF = TODAY.isoformat()


def days_ago(n: int, today: date = TODAY) -> str:
    """ISO date string n days before today."""
    return (today - timedelta(days=n)).isoformat()


def make_row(name="Jane Doe", days=200, tag="ULTRASOUND", payor=None, uuid=None, today=TODAY):
    """Raw billing row in the sheet's field names."""
    row = {
        "patient_name": name,
        "date_of_service": days_ago(days, today) if days is not None else None,
        "source_tab": tag,
    }
    if payor is not None:
        row["payor_type"] = payor
    if uuid is not None:
        row["patient_uuid"] = uuid
    return row


@pytest.fixture
def policy():
    """Default cooldown policy: PPO 180, Medicare 365, grace 30, overdue +90."""
    return CooldownPolicy()


@pytest.fixture
def store():
    """Empty record store."""
    return BillingRecordStore()


@pytest.fixture
def seeded_store():
    """Store holding the demo rows dated relative to TODAY."""
    s = BillingRecordStore()
    seed_store(s, TODAY)
    return s


@pytest.fixture
def client(seeded_store, policy):
    """TestClient over an app with its own seeded store (no shared state between tests)."""
    app = create_app(store=seeded_store, policy=policy, seed=False)
    return TestClient(app)


@pytest.fixture
def empty_client(store, policy):
    """TestClient over an app with an empty store."""
    return TestClient(create_app(store=store, policy=policy, seed=False))
