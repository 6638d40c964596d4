import pytest
from fastapi.testclient import TestClient

from stress_shield.data_store import ProfileStore, get_store
from stress_shield.main import app
from stress_shield.models import FinancialSnapshot


@pytest.fixture
def snapshot():
    return FinancialSnapshot(
        income=4000, rent=1200, utilities=200, transport_cost=300,
        food=500, debt=100, subscriptions=50, savings=600, emergency_savings=0,
    )


@pytest.fixture
def store(tmp_path):
    return ProfileStore(tmp_path / "users.json")


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
