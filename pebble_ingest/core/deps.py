from fastapi import Depends, Request
from sqlalchemy.orm import Session
from pebble_ingest.db.session import SessionLocal
from pebble_ingest.services.oracle import OwnershipOracle
from pebble_ingest.services.record_store import RecordStore
from pebble_ingest.services.telemetry_service import TelemetryService


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_oracle(request: Request) -> OwnershipOracle:
    # Built once at startup, shared read-only by every request.
    return request.app.state.oracle


def get_telemetry_service(
    db: Session = Depends(get_db),
    oracle: OwnershipOracle = Depends(get_oracle),
) -> TelemetryService:
    return TelemetryService(RecordStore(db), oracle)
