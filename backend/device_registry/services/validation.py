from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.errors import BadIdentifier, RequestValidationFailed
from ..models.device import DEVICE_STATUSES, DEVICE_TYPES
from ..schemas.common import DeviceCreate, DeviceUpdate

M = TypeVar("M", bound=BaseModel)

ALLOWED_VALUES = {"type": DEVICE_TYPES, "status": DEVICE_STATUSES}


def describe_error(err: dict) -> str:
    """Turn one pydantic error entry into a sentence about the offending field."""
    loc = err.get("loc") or ()
    field = str(loc[0]) if loc else "value"
    kind = err.get("type")

    if kind == "missing":
        return f'"{field}" is required'
    if kind == "string_type":
        return f'"{field}" must be a string'
    if kind == "string_too_short":
        return f'"{field}" is not allowed to be empty'
    if kind == "string_too_long":
        limit = (err.get("ctx") or {}).get("max_length")
        return f'"{field}" length must be less than or equal to {limit} characters long'
    if kind == "literal_error":
        allowed = ", ".join(ALLOWED_VALUES.get(field, ()))
        return f'"{field}" must be one of [{allowed}]'
    if kind in ("dict_type", "model_type"):
        return f'"{field}" must be of type object'
    if kind == "extra_forbidden":
        return f'"{field}" is not allowed'
    if kind == "json_invalid":
        return "Request body must be valid JSON"
    if kind == "value_error" and not loc:
        return str((err.get("ctx") or {}).get("error", err.get("msg")))
    return f'"{field}" {err.get("msg", "is invalid")}'


def _validate(model: Type[M], body: Any) -> M:
    if not isinstance(body, dict):
        raise RequestValidationFailed('"value" must be of type object')
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationFailed(describe_error(exc.errors()[0])) from exc


def validate_create(body: Any) -> DeviceCreate:
    return _validate(DeviceCreate, body)


def validate_update(body: Any) -> DeviceUpdate:
    return _validate(DeviceUpdate, body)


def parse_device_id(raw: str) -> int:
    """Path ids must be plain ASCII digits with a value above zero."""
    if not raw.isascii() or not raw.isdigit() or int(raw) <= 0:
        raise BadIdentifier(raw)
    return int(raw)
