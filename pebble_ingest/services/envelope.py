import enum
from dataclasses import dataclass
from typing import Any

from google.protobuf.message import DecodeError

from pebble_ingest.core.errors import MalformedPayload, UnknownEnvelopeType
from pebble_ingest.proto.pebble import BinPackage, SensorConfig, SensorData, SensorState


class PackageType(enum.IntEnum):
    CONFIG = 0
    STATE = 1
    DATA = 2


# Closed set: a new sub-message needs a new discriminant here.
SUB_MESSAGES = {
    PackageType.CONFIG: SensorConfig,
    PackageType.STATE: SensorState,
    PackageType.DATA: SensorData,
}


@dataclass(frozen=True)
class DecodedEnvelope:
    timestamp: int
    signature: bytes
    type: PackageType
    message: Any


def _parse(message_cls, raw: bytes):
    message = message_cls()
    try:
        message.ParseFromString(raw)
    except DecodeError as exc:
        raise MalformedPayload(f"failed to unmarshal {message_cls.DESCRIPTOR.name}", cause=exc) from exc
    return message


def _reject_foreign_fields(message) -> None:
    # Bytes of another shape parse "successfully" into unknown fields.
    size = len(message.SerializeToString())
    message.DiscardUnknownFields()
    if len(message.SerializeToString()) != size:
        raise MalformedPayload(
            f"failed to unmarshal senser package: payload is not a {message.DESCRIPTOR.name}"
        )


def decode_envelope(raw: bytes) -> DecodedEnvelope:
    """
    Two-stage decode: the BinPackage envelope, then its data as the
    sub-message selected by the type discriminant.
    """
    package = _parse(BinPackage, raw)

    try:
        package_type = PackageType(package.type)
    except ValueError as exc:
        raise UnknownEnvelopeType(f"unexpected senser package type: {package.type}") from exc

    message = _parse(SUB_MESSAGES[package_type], package.data)
    _reject_foreign_fields(message)

    return DecodedEnvelope(
        timestamp=package.timestamp,
        signature=bytes(package.signature),
        type=package_type,
        message=message,
    )
