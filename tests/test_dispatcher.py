import pytest
from sqlalchemy.exc import OperationalError

from conftest import DEVICE_ID, envelope
from pebble_ingest.core.errors import DispatchError, StoreError, UnknownEnvelopeType
from pebble_ingest.models.device import Device, DeviceStatus
from pebble_ingest.models.device_record import DeviceRecord
from pebble_ingest.proto.pebble import SensorData, SensorState
from pebble_ingest.services.dispatcher import dispatch
from pebble_ingest.services.envelope import DecodedEnvelope, PackageType, decode_envelope


@pytest.fixture
def device(db, owner):
    device = Device(id=DEVICE_ID, owner=owner.address, status=DeviceStatus.CONFIRM)
    db.add(device)
    db.commit()
    return device


def test_sensor_record_is_not_committed_by_dispatch(store, db, device):
    dispatch(store, device, decode_envelope(envelope(PackageType.DATA, SensorData(snr=1700), timestamp=5)))

    assert db.get(DeviceRecord, f"{DEVICE_ID}-5").snr == "62.5"
    store.rollback()
    assert db.query(DeviceRecord).count() == 0


def test_store_failures_are_wrapped(store, device, monkeypatch):
    def broken(values):
        raise StoreError("failed to create senser data", cause=OperationalError("INSERT", {}, Exception("disk full")))

    monkeypatch.setattr(store, "upsert_device_record", broken)

    with pytest.raises(DispatchError) as exc_info:
        dispatch(store, device, decode_envelope(envelope(PackageType.DATA, SensorData())))
    assert str(exc_info.value).startswith("failed to handle SensorData: failed to create senser data")
    assert exc_info.value.status_code == 500
    assert exc_info.value.context == {"device_id": DEVICE_ID}


def test_unknown_type_is_not_wrapped(store, device):
    forged = DecodedEnvelope(timestamp=0, signature=b"", type=7, message=SensorState())

    with pytest.raises(UnknownEnvelopeType):
        dispatch(store, device, forged)
