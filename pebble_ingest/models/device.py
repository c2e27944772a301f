import enum
from sqlalchemy import Column, String, Integer, Boolean, DateTime
from datetime import datetime
from pebble_ingest.db.base import Base


class DeviceStatus(enum.IntEnum):
    CREATED = 0
    PROPOSAL = 1
    CONFIRM = 2


class Device(Base):
    __tablename__ = "devices"

    id = Column(String, primary_key=True, index=True)   # ex: "did:io:0x..." or a legacy IMEI
    name = Column(String, nullable=False, default="")
    owner = Column(String, nullable=False, index=True)  # EIP-55 address
    address = Column(String, nullable=False, default="")
    avatar = Column(String, nullable=False, default="")
    status = Column(Integer, nullable=False, default=DeviceStatus.CREATED)
    proposer = Column(String, nullable=False, default="")

    # sensor config, reported by the device itself
    real_firmware = Column(String, nullable=False, default="")   # "<appID> <version>"
    configurable = Column(Boolean, nullable=False, default=True)
    state = Column(Integer, nullable=False, default=0)
    bulk_upload = Column(Integer, nullable=False, default=0)
    data_channel = Column(Integer, nullable=False, default=0)
    upload_period = Column(Integer, nullable=False, default=0)
    bulk_upload_sampling_cnt = Column(Integer, nullable=False, default=0)
    bulk_upload_sampling_freq = Column(Integer, nullable=False, default=0)
    beep = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    def firmware_app_id(self):
        """App id from real_firmware, or None unless it is exactly "<appID> <version>"."""
        parts = (self.real_firmware or "").split(" ")
        if len(parts) != 2:
            return None
        return parts[0]
