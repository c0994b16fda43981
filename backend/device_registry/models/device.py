from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, JSON, func, text
from ..db.session import Base

DEVICE_TYPES = ("light", "thermostat", "camera", "sensor", "switch", "speaker", "lock", "other")
DEVICE_STATUSES = ("on", "off", "online", "offline", "idle")
DEFAULT_STATUS = "offline"

def utcnow() -> datetime:
    # Naive UTC: sqlite drops tzinfo on read, so keep writes naive too
    return datetime.now(timezone.utc).replace(tzinfo=None)

class Device(Base):
    __tablename__ = "devices"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    status = Column(String, nullable=False, default=DEFAULT_STATUS, server_default=DEFAULT_STATUS)
    config = Column(JSON, default=dict, server_default=text("'{}'"))
    created_at = Column(DateTime, default=utcnow, server_default=func.current_timestamp())
    updated_at = Column(DateTime, default=utcnow, server_default=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<Device {self.id} {self.name!r} ({self.type}, {self.status})>"
