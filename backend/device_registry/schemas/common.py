from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from ..models.device import DEVICE_STATUSES, DEVICE_TYPES

DeviceType = Literal[DEVICE_TYPES]
DeviceStatus = Literal[DEVICE_STATUSES]

# Fields default to None without being Optional so an explicit null is rejected
class DeviceCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)
    name: str = Field(min_length=1, max_length=100)
    type: DeviceType
    status: DeviceStatus = None
    config: Dict[str, Any] = None

class DeviceUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)
    status: DeviceStatus = None
    config: Dict[str, Any] = None

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError('At least one of "status" or "config" is required')
        return self

class DeviceSummary(BaseModel):
    id: int; name: str; type: str; status: str
    created_at: Optional[datetime]; updated_at: Optional[datetime]
    model_config = ConfigDict(from_attributes=True)

class DeviceOut(DeviceSummary):
    config: Dict[str, Any]

class DeletedDevice(BaseModel):
    id: int; name: str; type: str
    model_config = ConfigDict(from_attributes=True)

class DeviceEnvelope(BaseModel):
    message: str
    device: DeviceOut

class DeviceListEnvelope(BaseModel):
    message: str
    count: int
    devices: List[DeviceSummary]

class DeleteEnvelope(BaseModel):
    message: str
    deleted_device: DeletedDevice

