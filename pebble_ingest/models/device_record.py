from sqlalchemy import Column, String, BigInteger, Text, DateTime
from datetime import datetime
from pebble_ingest.db.base import Base


def device_record_id(device_id: str, timestamp: int) -> str:
    """Composite key of a telemetry sample: the same device clock value overwrites."""
    return f"{device_id}-{timestamp}"


class DeviceRecord(Base):
    __tablename__ = "device_records"

    id = Column(String, primary_key=True, index=True)   # device_record_id(imei, timestamp)
    imei = Column(String, nullable=False, index=True)
    operator = Column(String, nullable=False, default="")
    timestamp = Column(BigInteger, nullable=False, index=True)
    signature = Column(String, nullable=False, default="")

    snr = Column(String, nullable=False, default="")
    vbat = Column(String, nullable=False, default="")
    latitude = Column(String, nullable=False, default="")
    longitude = Column(String, nullable=False, default="")
    gas_resistance = Column(String, nullable=False, default="")
    temperature = Column(String, nullable=False, default="")
    temperature2 = Column(String, nullable=False, default="")
    pressure = Column(String, nullable=False, default="")
    humidity = Column(String, nullable=False, default="")
    light = Column(String, nullable=False, default="")
    gyroscope = Column(Text, nullable=False, default="")
    accelerometer = Column(Text, nullable=False, default="")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)
