from fastapi import APIRouter, Depends, Response

from pebble_ingest.core.deps import get_telemetry_service
from pebble_ingest.schemas.device import DeviceQueryIn, DeviceQueryOut, TelemetryIn
from pebble_ingest.services.telemetry_service import TelemetryService

router = APIRouter(prefix="/device", tags=["device"])


# Owner/firmware lookup; never registers an unknown device
@router.get("", response_model=DeviceQueryOut, response_model_exclude_none=True)
def query_device(
    req: DeviceQueryIn,
    service: TelemetryService = Depends(get_telemetry_service),
):
    return service.query_device(req)


# Signed telemetry; first contact registers the device from the ioID contracts
@router.post("")
def receive(
    req: TelemetryIn,
    service: TelemetryService = Depends(get_telemetry_service),
):
    service.submit_telemetry(req)
    return Response(status_code=200)
