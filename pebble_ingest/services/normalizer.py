import json
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Dict, Iterable

# snr calibration (raw modem units)
SNR_RAW_MAX = 2700
SNR_RAW_MIN = 700
SNR_MAX = 100
SNR_MIN = 25
SNR_SCALE = 0.0375

# vbat calibration. The clamps return 100 / 0.1 while the linear branch
# returns v * 100, so the lower clamp is not on the percentage scale.
VBAT_RAW_OFFSET = 320
VBAT_RAW_SPAN = 90
VBAT_HIGH = 1
VBAT_LOW = 0.1
VBAT_HIGH_VALUE = 100
VBAT_LOW_VALUE = 0.1

COORDINATE_SCALE = 7      # raw / 10^7
SENSOR_SCALE = 2          # raw / 10^2

_ONE_DIGIT = Decimal("0.1")


def as_int32(value: int) -> int:
    """Reinterprets a uint32 wire value as int32."""
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _fixed_from_float(value: float) -> str:
    # Decimal(float) is the exact binary value, so half-even quantization
    # rounds the same way Go's strconv.FormatFloat(v, 'f', 1, 64) does.
    return format(Decimal(value).quantize(_ONE_DIGIT, rounding=ROUND_HALF_EVEN), "f")


def _fixed_point(raw: int, scale: int) -> str:
    return format(Decimal(raw).scaleb(-scale).quantize(Decimal(1).scaleb(-scale)), "f")


def snr(raw: int) -> str:
    value = float(raw)
    if value > SNR_RAW_MAX:
        value = SNR_MAX
    elif value < SNR_RAW_MIN:
        value = SNR_MIN
    else:
        value = (value - SNR_RAW_MIN) * SNR_SCALE + SNR_MIN
    return _fixed_from_float(value)


def vbat(raw: int) -> str:
    value = (float(raw) - VBAT_RAW_OFFSET) / VBAT_RAW_SPAN
    if value > VBAT_HIGH:
        value = VBAT_HIGH_VALUE
    elif value < VBAT_LOW:
        value = VBAT_LOW_VALUE
    else:
        value *= 100
    return _fixed_from_float(value)


def coordinate(raw: int) -> str:
    return _fixed_point(as_int32(raw), COORDINATE_SCALE)


def sensor(raw: int) -> str:
    return _fixed_point(as_int32(raw), SENSOR_SCALE)


def vector(values: Iterable[int]) -> str:
    values = list(values)
    if not values:
        # A nil slice marshals to null on the device side of the contract.
        return "null"
    return json.dumps(values, separators=(",", ":"))


def normalize_sensor_data(data) -> Dict[str, str]:
    """Maps a SensorData message to the calibrated DeviceRecord text columns."""
    return {
        "snr": snr(data.snr),
        "vbat": vbat(data.vbat),
        "latitude": coordinate(data.latitude),
        "longitude": coordinate(data.longitude),
        "gas_resistance": sensor(data.gas_resistance),
        "temperature": sensor(data.temperature),
        "temperature2": sensor(data.temperature2),
        "pressure": sensor(data.pressure),
        "humidity": sensor(data.humidity),
        "light": sensor(data.light),
        "gyroscope": vector(data.gyroscope),
        "accelerometer": vector(data.accelerometer),
    }
