import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, Request

from .. import schemas
from ..analytics import track
from ..dependencies import get_http_client
from ..limiter import limiter

router = APIRouter(prefix="/api/telemetry", tags=["telemetry"])


@router.post("/event", response_model=schemas.TelemetryEventResponse)
@limiter.limit("60/minute")
def capture_event(
    request: Request,
    payload: schemas.TelemetryEventRequest,
    background_tasks: BackgroundTasks,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    track(background_tasks, client, request, payload.event_name.strip().lower(), payload.params)
    return schemas.TelemetryEventResponse(ok=True)
