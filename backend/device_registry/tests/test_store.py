import time

import pytest

from device_registry.core.errors import NothingToUpdate, PersistenceError
from device_registry.db.store import SAMPLE_DEVICES, DeviceStore


def test_create_defaults_status_and_config(store):
    device = store.create("Kitchen Light", "light")
    assert device.id is not None
    assert device.status == "offline"
    assert device.config == {}
    assert device.created_at == device.updated_at


def test_get_by_id_matches_created_record(store):
    created = store.create("Porch Camera", "camera", status="online", config={"resolution": "4k"})
    fetched = store.get_by_id(created.id)
    assert fetched is not None
    for field in ("id", "name", "type", "status", "config", "created_at", "updated_at"):
        assert getattr(fetched, field) == getattr(created, field)
    assert fetched.created_at == fetched.updated_at


def test_get_by_id_missing_returns_none(store):
    assert store.get_by_id(9999) is None


def test_ids_increase(store):
    first = store.create("A", "sensor")
    second = store.create("B", "sensor")
    assert second.id > first.id


def test_list_newest_first(store):
    older = store.create("Old Switch", "switch")
    newer = store.create("New Switch", "switch")
    ids = [d.id for d in store.list()]
    assert ids == [newer.id, older.id]


def test_update_status_keeps_config(store):
    device = store.create("Hall Light", "light", config={"brightness": 40})
    time.sleep(0.01)
    assert store.update(device.id, status="on") is True
    updated = store.get_by_id(device.id)
    assert updated.status == "on"
    assert updated.config == {"brightness": 40}
    assert updated.updated_at > device.updated_at
    assert updated.created_at == device.created_at


def test_update_config_keeps_status(store):
    device = store.create("Thermo", "thermostat", status="idle")
    time.sleep(0.01)
    assert store.update(device.id, config={"temperature": 19}) is True
    updated = store.get_by_id(device.id)
    assert updated.status == "idle"
    assert updated.config == {"temperature": 19}
    assert updated.updated_at > device.updated_at


def test_update_can_clear_config(store):
    device = store.create("Speaker", "speaker", config={"volume": 3})
    assert store.update(device.id, config={}) is True
    assert store.get_by_id(device.id).config == {}


def test_update_requires_a_field(store):
    device = store.create("Lock", "lock")
    with pytest.raises(NothingToUpdate):
        store.update(device.id)


def test_update_missing_row(store):
    assert store.update(4242, status="off") is False


def test_delete(store):
    device = store.create("Garage Lock", "lock")
    assert store.delete(device.id) is True
    assert store.get_by_id(device.id) is None
    assert store.delete(device.id) is False


def test_seed_runs_once(db_uri):
    first = DeviceStore(db_uri)
    first.init()
    assert len(first.list()) == len(SAMPLE_DEVICES)
    first.close()

    second = DeviceStore(db_uri)
    second.init()
    devices = second.list()
    second.close()
    assert len(devices) == len(SAMPLE_DEVICES)
    names = {d.name for d in devices}
    assert names == {"Living Room Light", "Smart Thermostat", "Security Camera"}
    camera = next(d for d in devices if d.type == "camera")
    assert camera.status == "online"
    assert camera.config == {"resolution": "1080p", "night_vision": True}


def test_seed_skipped_when_table_has_rows(db_uri):
    s = DeviceStore(db_uri, seed_sample_devices=False)
    s.init()
    s.create("Only Device", "other")
    s.close()

    s = DeviceStore(db_uri)
    s.init()
    assert [d.name for d in s.list()] == ["Only Device"]
    s.close()


def test_init_twice_is_harmless(store):
    store.create("X", "other")
    store.init()
    assert len(store.list()) == 1


def test_close_is_idempotent(db_uri):
    s = DeviceStore(db_uri)
    s.close()
    s.init()
    assert s.is_connected
    s.close()
    s.close()
    assert not s.is_connected


def test_operations_after_close_raise_persistence_error(db_uri):
    s = DeviceStore(db_uri)
    with pytest.raises(PersistenceError):
        s.list()


def test_ids_beyond_integer_range(store):
    huge = 2**64
    assert store.get_by_id(huge) is None
    assert store.update(huge, status="on") is False
    assert store.delete(huge) is False
