import logging
from datetime import datetime

from pebble_ingest.core.errors import IngestError, DispatchError, UnknownEnvelopeType
from pebble_ingest.models.device import Device
from pebble_ingest.models.device_record import device_record_id
from pebble_ingest.services import normalizer
from pebble_ingest.services.envelope import DecodedEnvelope, PackageType
from pebble_ingest.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def handle_config(store: RecordStore, device: Device, config) -> None:
    # Full replace of the reported sensor configuration.
    store.update_device(device.id, {
        "bulk_upload": normalizer.as_int32(config.bulk_upload),
        "data_channel": normalizer.as_int32(config.data_channel),
        "upload_period": normalizer.as_int32(config.upload_period),
        "bulk_upload_sampling_cnt": normalizer.as_int32(config.bulk_upload_sampling_cnt),
        "bulk_upload_sampling_freq": normalizer.as_int32(config.bulk_upload_sampling_freq),
        "beep": normalizer.as_int32(config.beep),
        "real_firmware": config.firmware,
        "configurable": config.device_configurable,
        "updated_at": datetime.utcnow(),
    })


def handle_state(store: RecordStore, device: Device, state) -> None:
    store.update_device(device.id, {
        "state": normalizer.as_int32(state.state),
        "updated_at": datetime.utcnow(),
    })


def handle_sensor(store: RecordStore, device: Device, envelope: DecodedEnvelope) -> None:
    now = datetime.utcnow()
    values = {
        "id": device_record_id(device.id, envelope.timestamp),
        "imei": device.id,
        "timestamp": envelope.timestamp,
        # Trailing zero byte kept as persisted by the existing backend.
        "signature": (envelope.signature + b"\x00").hex(),
        "operator": "",
        "created_at": now,
        "updated_at": now,
    }
    values.update(normalizer.normalize_sensor_data(envelope.message))
    store.upsert_device_record(values)


def dispatch(store: RecordStore, device: Device, envelope: DecodedEnvelope) -> None:
    """Routes a decoded envelope to its update path. Does not commit."""
    name = type(envelope.message).DESCRIPTOR.name
    try:
        if envelope.type == PackageType.CONFIG:
            handle_config(store, device, envelope.message)
        elif envelope.type == PackageType.STATE:
            handle_state(store, device, envelope.message)
        elif envelope.type == PackageType.DATA:
            handle_sensor(store, device, envelope)
        else:
            raise UnknownEnvelopeType(f"unexpected senser package type: {envelope.type}")
    except UnknownEnvelopeType:
        raise
    except IngestError as exc:
        raise DispatchError(f"failed to handle {name}", cause=exc, device_id=device.id) from exc
    logger.debug("Handled %s for device %s", name, device.id)
