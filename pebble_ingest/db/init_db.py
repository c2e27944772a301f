from pebble_ingest.db.base import Base
from pebble_ingest.db.session import engine

# Models must be imported so create_all sees their tables
from pebble_ingest.models import app, device, device_record  # noqa: F401


def init_db():
    Base.metadata.create_all(bind=engine)
