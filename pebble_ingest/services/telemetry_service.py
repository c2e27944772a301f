import base64
import binascii
import logging
import re

from pebble_ingest.core.errors import IngestError, InvalidPayloadEncoding
from pebble_ingest.core.security import recover_signer
from pebble_ingest.schemas.device import DeviceQueryIn, DeviceQueryOut, TelemetryIn
from pebble_ingest.services.device_directory import DeviceDirectory
from pebble_ingest.services.dispatcher import dispatch
from pebble_ingest.services.envelope import decode_envelope
from pebble_ingest.services.oracle import OwnershipOracle
from pebble_ingest.services.record_store import RecordStore

logger = logging.getLogger(__name__)

_RAW_URL_BASE64 = re.compile(r"[A-Za-z0-9_-]*")


def decode_payload(payload: str) -> bytes:
    """Strict unpadded base64url, as produced by the devices."""
    if not _RAW_URL_BASE64.fullmatch(payload) or len(payload) % 4 == 1:
        raise InvalidPayloadEncoding("failed to decode base64 data")
    try:
        return base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4))
    except (binascii.Error, ValueError) as exc:
        raise InvalidPayloadEncoding("failed to decode base64 data", cause=exc) from exc


class TelemetryService:
    """
    The two device operations: an authorization-only query and the
    authenticated telemetry submission.
    """

    def __init__(self, store: RecordStore, oracle: OwnershipOracle):
        self.store = store
        self.directory = DeviceDirectory(store, oracle)

    def query_device(self, req: DeviceQueryIn) -> DeviceQueryOut:
        signer = recover_signer(req.signed_fields(), req.signature)
        device = self.directory.authorize(req.device_id, signer)

        out = DeviceQueryOut(status=device.status, owner=device.owner)
        app_id = device.firmware_app_id()
        if app_id is not None:
            app = self.store.app(app_id)
            if app is not None:
                out.firmware = app.id or None
                out.uri = app.uri or None
                out.version = app.version or None
        return out

    def submit_telemetry(self, req: TelemetryIn) -> None:
        signer = recover_signer(req.signed_fields(), req.signature)
        # A bootstrapped device stays registered even if the payload is rejected.
        device = self.directory.resolve(req.device_id, signer)

        envelope = decode_envelope(decode_payload(req.payload))
        try:
            dispatch(self.store, device, envelope)
            self.store.commit()
        except IngestError:
            self.store.rollback()
            raise
        logger.info(
            "Accepted %s from %s (timestamp %s)",
            envelope.type.name, device.id, envelope.timestamp,
        )
