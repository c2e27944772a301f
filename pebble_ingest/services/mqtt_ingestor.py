import logging
import threading
from typing import Optional

import paho.mqtt.client as mqtt
from pydantic import ValidationError

from pebble_ingest.core.config import settings
from pebble_ingest.core.errors import IngestError
from pebble_ingest.db.session import SessionLocal
from pebble_ingest.schemas.device import TelemetryIn
from pebble_ingest.services.oracle import OwnershipOracle
from pebble_ingest.services.record_store import RecordStore
from pebble_ingest.services.telemetry_service import TelemetryService

logger = logging.getLogger(__name__)

# ---- Config from settings ----
MQTT_BROKER_HOST = settings.MQTT_BROKER_HOST
MQTT_BROKER_PORT = settings.MQTT_BROKER_PORT
MQTT_TOPIC_ROOT = settings.MQTT_TOPIC_ROOT
MQTT_USERNAME = settings.MQTT_USERNAME
MQTT_PASSWORD = settings.MQTT_PASSWORD

TELEMETRY_SUFFIX = "telemetry"

_mqtt_client: Optional[mqtt.Client] = None


def telemetry_topic() -> str:
    return f"{MQTT_TOPIC_ROOT}/+/{TELEMETRY_SUFFIX}"


# ========= Message handling =========

def process_message(topic: str, payload: bytes, oracle: OwnershipOracle) -> bool:
    """
    Runs one MQTT telemetry message through the submit pipeline.

    The body is the same JSON object accepted by POST /device:
      {"deviceID": "did:io:0x...", "payload": "<base64url>", "signature": "0x..."}

    Returns True when the telemetry was accepted. There is no reply channel,
    so rejected messages are logged and dropped.
    """
    try:
        req = TelemetryIn.model_validate_json(payload)
    except ValidationError as exc:
        logger.warning("Invalid telemetry message on %s: %s", topic, exc)
        return False

    db = SessionLocal()
    try:
        TelemetryService(RecordStore(db), oracle).submit_telemetry(req)
        return True
    except IngestError as exc:
        if exc.is_client_error:
            logger.warning("Telemetry from %s on %s rejected: %s", req.device_id, topic, exc)
        else:
            logger.error("Telemetry from %s on %s failed: %s", req.device_id, topic, exc, exc_info=exc)
        return False
    except Exception:
        # Escaping the callback would stop loop_forever.
        db.rollback()
        logger.exception("Telemetry from %s on %s failed unexpectedly", req.device_id, topic)
        return False
    finally:
        db.close()


# ========= MQTT callbacks =========

def _on_connect(client: mqtt.Client, userdata, flags, reason_code, properties):
    if reason_code.is_failure:
        logger.error("[MQTT-INGESTOR] Connection refused: %s", reason_code)
        return
    topic = telemetry_topic()
    client.subscribe(topic)
    logger.info("[MQTT-INGESTOR] Connected, subscribed to %s", topic)


def _on_message(client: mqtt.Client, userdata, msg: mqtt.MQTTMessage):
    # userdata is the ownership oracle handed to start_mqtt_ingestor
    if not msg.topic.endswith("/" + TELEMETRY_SUFFIX):
        return
    process_message(msg.topic, msg.payload, userdata)


# ========= Ingestor startup =========

def start_mqtt_ingestor(oracle: OwnershipOracle):
    """
    Creates the MQTT client, connects to the broker and runs its loop in a
    daemon thread. Called from the FastAPI startup event.
    """
    global _mqtt_client
    if _mqtt_client is not None:
        # already started
        return

    client = mqtt.Client(
        mqtt.CallbackAPIVersion.VERSION2,
        client_id="PEBBLE-INGESTOR",
        clean_session=True,
        userdata=oracle,
    )

    if MQTT_USERNAME:
        client.username_pw_set(MQTT_USERNAME, MQTT_PASSWORD or "")

    client.on_connect = _on_connect
    client.on_message = _on_message

    logger.info("[MQTT-INGESTOR] Connecting to %s:%s ...", MQTT_BROKER_HOST, MQTT_BROKER_PORT)
    client.connect(MQTT_BROKER_HOST, MQTT_BROKER_PORT, keepalive=60)

    thread = threading.Thread(target=client.loop_forever, daemon=True)
    thread.start()

    _mqtt_client = client
    logger.info("[MQTT-INGESTOR] MQTT ingestor running in a background thread.")
