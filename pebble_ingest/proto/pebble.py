"""
Pebble wire messages (proto3, package "pebble").

The descriptors are declared here instead of shipping protoc output, so the
schema stays readable next to the code that consumes it:

    message BinPackage {
      enum PackageType { CONFIG = 0; STATE = 1; DATA = 2; }
      PackageType type = 1;
      uint32 timestamp = 2;
      bytes data = 3;
      bytes signature = 4;
    }
    message SensorConfig { ... }   # see _SENSOR_CONFIG
    message SensorState  { uint32 state = 1; }
    message SensorData   { ... }   # see _SENSOR_DATA
"""
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_F = descriptor_pb2.FieldDescriptorProto

_PACKAGE = "pebble"

_SENSOR_CONFIG = [
    ("bulk_upload", 1, _F.TYPE_UINT32),
    ("data_channel", 2, _F.TYPE_UINT32),
    ("upload_period", 3, _F.TYPE_UINT32),
    ("bulk_upload_sampling_cnt", 4, _F.TYPE_UINT32),
    ("bulk_upload_sampling_freq", 5, _F.TYPE_UINT32),
    ("beep", 6, _F.TYPE_UINT32),
    ("firmware", 7, _F.TYPE_STRING),
    ("device_configurable", 8, _F.TYPE_BOOL),
]

_SENSOR_STATE = [
    ("state", 1, _F.TYPE_UINT32),
]

_SENSOR_DATA = [
    ("snr", 1, _F.TYPE_UINT32),
    ("vbat", 2, _F.TYPE_UINT32),
    ("latitude", 3, _F.TYPE_SINT32),
    ("longitude", 4, _F.TYPE_SINT32),
    ("gas_resistance", 5, _F.TYPE_UINT32),
    ("temperature", 6, _F.TYPE_SINT32),
    ("pressure", 7, _F.TYPE_UINT32),
    ("humidity", 8, _F.TYPE_UINT32),
    ("light", 9, _F.TYPE_UINT32),
    ("temperature2", 10, _F.TYPE_UINT32),
    ("gyroscope", 11, _F.TYPE_SINT32, _F.LABEL_REPEATED),
    ("accelerometer", 12, _F.TYPE_SINT32, _F.LABEL_REPEATED),
    ("random", 13, _F.TYPE_STRING),
]


def _add_message(file_proto, name, fields):
    message = file_proto.message_type.add(name=name)
    for spec in fields:
        field_name, number, field_type = spec[:3]
        label = spec[3] if len(spec) > 3 else _F.LABEL_OPTIONAL
        message.field.add(name=field_name, number=number, type=field_type, label=label)
    return message


def _build_file():
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="pebble.proto",
        package=_PACKAGE,
        syntax="proto3",
    )

    bin_package = _add_message(
        file_proto,
        "BinPackage",
        [
            ("timestamp", 2, _F.TYPE_UINT32),
            ("data", 3, _F.TYPE_BYTES),
            ("signature", 4, _F.TYPE_BYTES),
        ],
    )
    package_type = bin_package.enum_type.add(name="PackageType")
    package_type.value.add(name="CONFIG", number=0)
    package_type.value.add(name="STATE", number=1)
    package_type.value.add(name="DATA", number=2)
    bin_package.field.add(
        name="type",
        number=1,
        type=_F.TYPE_ENUM,
        type_name=f".{_PACKAGE}.BinPackage.PackageType",
        label=_F.LABEL_OPTIONAL,
    )

    _add_message(file_proto, "SensorConfig", _SENSOR_CONFIG)
    _add_message(file_proto, "SensorState", _SENSOR_STATE)
    _add_message(file_proto, "SensorData", _SENSOR_DATA)
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{_PACKAGE}.{name}"))


BinPackage = _message_class("BinPackage")
SensorConfig = _message_class("SensorConfig")
SensorState = _message_class("SensorState")
SensorData = _message_class("SensorData")
