import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pebble_ingest.api import devices
from pebble_ingest.core.config import settings
from pebble_ingest.core.errors import IngestError, InvalidRequest
from pebble_ingest.db.init_db import init_db
from pebble_ingest.services.mqtt_ingestor import start_mqtt_ingestor
from pebble_ingest.services.oracle import Web3OwnershipOracle

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Pebble ingest")

app.include_router(devices.router)


def _error_response(exc: IngestError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message(), "code": exc.code},
    )


@app.exception_handler(IngestError)
async def ingest_error_handler(request: Request, exc: IngestError):
    context = " ".join(f"{k}={v}" for k, v in exc.context.items())
    if exc.is_client_error:
        logger.warning("%s %s rejected: %s %s", request.method, request.url.path, exc, context)
    else:
        logger.error(
            "%s %s failed: %s %s", request.method, request.url.path, exc, context,
            exc_info=exc,
        )
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    error = InvalidRequest("invalid request payload", cause=ValueError(str(exc.errors())))
    logger.warning("%s %s rejected: %s", request.method, request.url.path, error)
    return _error_response(error)


@app.on_event("startup")
def on_startup():
    init_db()
    app.state.oracle = Web3OwnershipOracle.from_settings(settings)
    if settings.MQTT_ENABLED:
        start_mqtt_ingestor(app.state.oracle)
