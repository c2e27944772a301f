import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pebble_ingest.core.errors import StoreError
from pebble_ingest.models.app import App
from pebble_ingest.models.device import Device
from pebble_ingest.models.device_record import DeviceRecord

logger = logging.getLogger(__name__)

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RecordStore:
    """
    Key-based access to devices, apps and device records on top of a
    SQLAlchemy session. Nothing is committed unless commit() is called.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _operation(self, message: str, **context: Any):
        try:
            yield
        except SQLAlchemyError as exc:
            raise StoreError(message, cause=exc, **context) from exc

    def device(self, device_id: str) -> Optional[Device]:
        with self._operation("failed to query device", device_id=device_id):
            return self.db.get(Device, device_id)

    def app(self, app_id: str) -> Optional[App]:
        with self._operation("failed to query app", app_id=app_id):
            return self.db.get(App, app_id)

    def _upsert(self, model, values: Dict[str, Any]) -> None:
        dialect = self.db.get_bind().dialect.name
        insert = _INSERTS.get(dialect)
        if insert is None:
            raise StoreError(f"upsert is not supported on {dialect}")

        stmt = insert(model.__table__).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={key: stmt.excluded[key] for key in values if key != "id"},
        )
        self.db.execute(stmt)

    def upsert_device(self, values: Dict[str, Any]) -> Device:
        device_id = values["id"]
        with self._operation("failed to upsert device", device_id=device_id):
            self._upsert(Device, values)
            return self.db.get(Device, device_id, populate_existing=True)

    def update_device(self, device_id: str, values: Dict[str, Any]) -> None:
        with self._operation("failed to update device", device_id=device_id):
            self.db.execute(
                update(Device)
                .where(Device.id == device_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )

    def upsert_device_record(self, values: Dict[str, Any]) -> None:
        with self._operation("failed to create senser data", record_id=values["id"]):
            self._upsert(DeviceRecord, values)

    def commit(self) -> None:
        with self._operation("failed to commit transaction"):
            self.db.commit()

    def rollback(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError:
            logger.exception("rollback failed")
