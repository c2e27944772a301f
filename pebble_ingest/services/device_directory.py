import logging
import string
from datetime import datetime

from web3 import Web3

from pebble_ingest.core.errors import DeviceNotFound, PermissionDenied
from pebble_ingest.models.device import Device, DeviceStatus
from pebble_ingest.services.oracle import OwnershipOracle
from pebble_ingest.services.record_store import RecordStore

logger = logging.getLogger(__name__)

DID_PREFIX = "did:io:"
ADDRESS_LENGTH = 20

_HEX_DIGITS = frozenset(string.hexdigits)


def device_address(device_id: str) -> str:
    """
    On-chain address of a device id, with the lenient parsing the chain
    tooling applies: "did:io:" and "0x" are optional, an odd digit count is
    left-padded, decoding stops at the first bad hex pair, and only the last
    20 bytes are kept.
    """
    text = device_id[len(DID_PREFIX):] if device_id.startswith(DID_PREFIX) else device_id
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if len(text) % 2 == 1:
        text = "0" + text

    valid = 0
    while valid < len(text) and text[valid] in _HEX_DIGITS and text[valid + 1] in _HEX_DIGITS:
        valid += 2

    raw = bytes.fromhex(text[:valid])[-ADDRESS_LENGTH:]
    return Web3.to_checksum_address("0x" + raw.rjust(ADDRESS_LENGTH, b"\x00").hex())


class DeviceDirectory:
    """
    Device -> owner resolution. The local store answers first; the oracle
    is only asked about devices never seen before, on the write path.
    """

    def __init__(self, store: RecordStore, oracle: OwnershipOracle):
        self.store = store
        self.oracle = oracle

    def _check_owner(self, device: Device, signer: str) -> Device:
        if device.owner != signer:
            logger.warning("Signer %s is not the owner of %s", signer, device.id)
            raise PermissionDenied("no permission to access the device", device_id=device.id)
        return device

    def authorize(self, device_id: str, signer: str) -> Device:
        """Read path: unknown devices are not bootstrapped."""
        device = self.store.device(device_id)
        if device is None:
            raise DeviceNotFound("device not exist", device_id=device_id)
        return self._check_owner(device, signer)

    def resolve(self, device_id: str, signer: str) -> Device:
        """Write path: first contact bootstraps the device from the chain."""
        device = self.store.device(device_id)
        if device is not None:
            return self._check_owner(device, signer)
        return self._bootstrap(device_id, signer)

    def _bootstrap(self, device_id: str, signer: str) -> Device:
        address = device_address(device_id)
        token_id = self.oracle.token_for_device(address)
        chain_owner = self.oracle.owner_of(token_id)

        if chain_owner.lower() != signer.lower():
            logger.warning(
                "Contract owner %s of %s (token %s) does not match signer %s",
                chain_owner, device_id, token_id, signer,
            )
            raise PermissionDenied("no permission to access the device", device_id=device_id, token_id=token_id)

        now = datetime.utcnow()
        # Racing first contacts write the same row; the upsert keeps it single.
        device = self.store.upsert_device({
            "id": device_id,
            "owner": signer,
            "address": address,
            "status": int(DeviceStatus.CONFIRM),
            "proposer": signer,
            "created_at": now,
            "updated_at": now,
        })
        self.store.commit()
        logger.info("Bootstrapped device %s for owner %s (token %s)", device_id, signer, token_id)
        return device
