import logging
from contextlib import contextmanager
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from ..core.errors import ApiError
from ..db.store import DeviceStore
from ..schemas.common import (
    DeletedDevice,
    DeleteEnvelope,
    DeviceEnvelope,
    DeviceListEnvelope,
    DeviceOut,
    DeviceSummary,
)
from ..services.validation import parse_device_id, validate_create, validate_update

router = APIRouter(prefix="/devices", tags=["devices"])
logger = logging.getLogger("device_registry.api")

def get_store(request: Request) -> DeviceStore:
    return request.app.state.store

def _not_found(device_id: int) -> ApiError:
    return ApiError(404, "Device not found", message=f"Device with ID {device_id} does not exist")

@contextmanager
def _internal_errors(action: str):
    """Anything unexpected below this point becomes a generic 500 for ``action``."""
    try:
        yield
    except ApiError:
        raise
    except Exception as exc:
        logger.exception(f"Error trying to {action}")
        raise ApiError(500, "Internal server error", message=f"Failed to {action}") from exc


@router.post("/", status_code=201, response_model=DeviceEnvelope, include_in_schema=False)
@router.post("", status_code=201, response_model=DeviceEnvelope)
def register_device(payload: Any = Body(None), store: DeviceStore = Depends(get_store)):
    data = validate_create(payload)
    with _internal_errors("register device"):
        device = store.create(data.name, data.type, status=data.status, config=data.config)
        return DeviceEnvelope(message="Device registered successfully", device=DeviceOut.model_validate(device))


@router.get("/", response_model=DeviceListEnvelope, include_in_schema=False)
@router.get("", response_model=DeviceListEnvelope)
def list_devices(store: DeviceStore = Depends(get_store)):
    with _internal_errors("retrieve devices"):
        devices = [DeviceSummary.model_validate(d) for d in store.list()]
        return DeviceListEnvelope(message="Devices retrieved successfully", count=len(devices), devices=devices)


@router.get("/{device_id}", response_model=DeviceEnvelope)
def get_device(device_id: str, store: DeviceStore = Depends(get_store)):
    did = parse_device_id(device_id)
    with _internal_errors("retrieve device"):
        device = store.get_by_id(did)
        if device is None:
            raise _not_found(did)
        return DeviceEnvelope(message="Device retrieved successfully", device=DeviceOut.model_validate(device))


@router.put("/{device_id}", response_model=DeviceEnvelope)
def update_device(device_id: str, payload: Any = Body(None), store: DeviceStore = Depends(get_store)):
    did = parse_device_id(device_id)
    data = validate_update(payload)
    with _internal_errors("update device"):
        if store.get_by_id(did) is None:
            raise _not_found(did)
        # The row can still vanish between the check and the write
        if not store.update(did, status=data.status, config=data.config):
            raise _not_found(did)
        device = store.get_by_id(did)
        if device is None:
            raise _not_found(did)
        return DeviceEnvelope(message="Device updated successfully", device=DeviceOut.model_validate(device))


@router.delete("/{device_id}", response_model=DeleteEnvelope)
def delete_device(device_id: str, store: DeviceStore = Depends(get_store)):
    did = parse_device_id(device_id)
    with _internal_errors("delete device"):
        existing = store.get_by_id(did)
        if existing is None:
            raise _not_found(did)
        if not store.delete(did):
            raise _not_found(did)
        return DeleteEnvelope(message="Device deleted successfully", deleted_device=DeletedDevice.model_validate(existing))
