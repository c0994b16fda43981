import pytest
from fastapi.testclient import TestClient

from device_registry.core.config import Settings
from device_registry.db.store import DeviceStore
from device_registry.main import create_app


@pytest.fixture
def db_uri(tmp_path):
    return f"sqlite:///{tmp_path / 'devices.db'}"


@pytest.fixture
def store(db_uri):
    s = DeviceStore(db_uri, seed_sample_devices=False)
    s.init()
    yield s
    s.close()


@pytest.fixture
def client(db_uri):
    app = create_app(Settings(DB_URI=db_uri, SEED_SAMPLE_DEVICES=False))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seeded_client(db_uri):
    app = create_app(Settings(DB_URI=db_uri, SEED_SAMPLE_DEVICES=True))
    with TestClient(app) as c:
        yield c
