"""
Device store: the single point of contact with the ``devices`` table.

Every public method runs exactly one statement in its own short-lived
session, so the engine's own locking is the only coordination needed
between concurrent requests. A missing row is reported through the return
value (``None`` / ``False``); exceptions are reserved for real failures.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import delete as sa_delete, func, select, update as sa_update
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.errors import NothingToUpdate, PersistenceError
from ..models.device import DEFAULT_STATUS, Device, utcnow
from .session import init_db, make_engine, make_session_factory

logger = logging.getLogger("device_registry.store")

# Largest value a SQLite INTEGER primary key can hold
MAX_DEVICE_ID = 2**63 - 1

SAMPLE_DEVICES = [
    {
        "name": "Living Room Light",
        "type": "light",
        "status": "on",
        "config": {"brightness": 75, "color": "warm_white"},
    },
    {
        "name": "Smart Thermostat",
        "type": "thermostat",
        "status": "on",
        "config": {"temperature": 22, "mode": "heat"},
    },
    {
        "name": "Security Camera",
        "type": "camera",
        "status": "online",
        "config": {"resolution": "1080p", "night_vision": True},
    },
]


def _with_config(device: Device) -> Device:
    if not isinstance(device.config, dict):
        device.config = {}
    return device


class DeviceStore:
    """Explicitly constructed store, one per application instance."""

    def __init__(self, db_uri: str, seed_sample_devices: bool = True):
        self.db_uri = db_uri
        self.seed_sample_devices = seed_sample_devices
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    # ---------- lifecycle ----------

    def init(self) -> None:
        """Open the database, create the table if needed and seed an empty table."""
        if self.is_connected:
            logger.info("Device store already initialized")
            return

        self._ensure_sqlite_dir()
        engine = make_engine(self.db_uri)
        try:
            init_db(engine)
            logger.info("Devices table created or already exists")
            session_factory = make_session_factory(engine)
            if self.seed_sample_devices:
                with session_factory() as session:
                    if self._seed(session):
                        logger.info(f"Seeded {len(SAMPLE_DEVICES)} sample devices")
        except SQLAlchemyError as exc:
            engine.dispose()
            logger.exception("Error initializing device store")
            raise PersistenceError("Failed to initialize device store") from exc

        self._engine = engine
        self._session_factory = session_factory
        logger.info(f"Connected to database {engine.url.render_as_string(hide_password=True)}")

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connection closed")

    def _ensure_sqlite_dir(self) -> None:
        url = make_url(self.db_uri)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _seed(session: Session) -> bool:
        count = session.scalar(select(func.count()).select_from(Device))
        if count:
            return False
        now = utcnow()
        session.add_all([Device(**sample, created_at=now, updated_at=now) for sample in SAMPLE_DEVICES])
        session.commit()
        return True

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        if self._session_factory is None:
            raise PersistenceError(f"Failed to {action}: store is not initialized")
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception(f"Failed to {action}")
            raise PersistenceError(f"Failed to {action}") from exc
        finally:
            session.close()

    # ---------- CRUD ----------

    def create(
        self,
        name: str,
        device_type: str,
        status: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> Device:
        now = utcnow()
        device = Device(
            name=name,
            type=device_type,
            status=status or DEFAULT_STATUS,
            config=config if config is not None else {},
            created_at=now,
            updated_at=now,
        )
        with self._session("create device") as session:
            session.add(device)
            session.commit()
        logger.info(f"Created device {device.id} ({device.type})")
        return _with_config(device)

    def list(self) -> List[Device]:
        query = select(Device).order_by(Device.created_at.desc(), Device.id.desc())
        with self._session("list devices") as session:
            devices = session.scalars(query).all()
        return [_with_config(d) for d in devices]

    def get_by_id(self, device_id: int) -> Optional[Device]:
        if device_id > MAX_DEVICE_ID:
            return None
        with self._session("fetch device") as session:
            device = session.get(Device, device_id)
        return _with_config(device) if device is not None else None

    def update(
        self,
        device_id: int,
        status: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Apply the supplied fields and bump ``updated_at``; False when no row matched."""
        values: Dict[str, Any] = {}
        if status is not None:
            values["status"] = status
        if config is not None:
            values["config"] = config
        if not values:
            raise NothingToUpdate("No valid fields to update")
        values["updated_at"] = utcnow()
        if device_id > MAX_DEVICE_ID:
            return False

        statement = sa_update(Device).where(Device.id == device_id).values(**values)
        with self._session("update device") as session:
            result = session.execute(statement)
            session.commit()
        return result.rowcount > 0

    def delete(self, device_id: int) -> bool:
        if device_id > MAX_DEVICE_ID:
            return False
        with self._session("delete device") as session:
            result = session.execute(sa_delete(Device).where(Device.id == device_id))
            session.commit()
        removed = result.rowcount > 0
        if removed:
            logger.info(f"Deleted device {device_id}")
        return removed
