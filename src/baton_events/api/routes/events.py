import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from ...core.config import settings
from ...models.schemas import EventSource, StreamStatusResponse
from ...services.event_manager import event_manager
from ...services.ingestion import EmptyPayloadError

router = APIRouter(prefix="/api/events", tags=["Events"])
logger = logging.getLogger(__name__)

# Heartbeats are produced by the broadcaster; keep the transport's own
# ping out of the way.
TRANSPORT_PING_INTERVAL = 24 * 60 * 60


async def read_raw_body(request: Request) -> str:
    """
    Read the request body as text, whatever the declared content type.

    Stops reading once ``max_body_bytes`` is exceeded, so an oversized body
    is never held in memory.
    """
    limit = settings.max_body_bytes
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise HTTPException(status_code=413, detail="Payload too large")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise HTTPException(status_code=413, detail="Payload too large")
    return body.decode("utf-8", errors="replace")


def parse_limit(value: Optional[str]) -> int:
    """Parse the ``limit`` query parameter, falling back to the default."""
    try:
        limit = int(value)
    except (TypeError, ValueError):
        limit = settings.default_query_limit
    return max(0, min(limit, event_manager.event_log.capacity))


async def _ingest(request: Request, source: EventSource) -> JSONResponse:
    raw_text = await read_raw_body(request)
    try:
        result = await event_manager.ingest(raw_text, source)
    except EmptyPayloadError as e:
        return JSONResponse(status_code=400, content=e.body)
    return JSONResponse(status_code=200, content=result.body)


@router.post("")
async def ingest_legacy(request: Request) -> JSONResponse:
    """Ingest a raw baton message (first-generation device endpoint)."""
    return await _ingest(request, EventSource.LEGACY)


@router.post("/hookdeck")
async def ingest_hookdeck(request: Request) -> JSONResponse:
    """Ingest a raw baton message relayed through Hookdeck."""
    return await _ingest(request, EventSource.HOOKDECK)


@router.post("/direct")
async def ingest_direct(request: Request) -> JSONResponse:
    """Ingest a raw baton message posted directly by a device or gateway."""
    return await _ingest(request, EventSource.DIRECT)


@router.get("/all")
async def list_events(
    limit: Optional[str] = Query(
        None,
        description="Maximum number of events to return (newest first)"
    ),
) -> List[Dict[str, Any]]:
    """Return recent events, newest first."""
    return [event.to_wire() for event in event_manager.recent(parse_limit(limit))]


@router.get("/status", response_model=StreamStatusResponse)
async def stream_status() -> StreamStatusResponse:
    """Report connected observers and log occupancy."""
    return StreamStatusResponse(
        subscribers=event_manager.broadcaster.subscriber_count,
        events=len(event_manager.event_log),
        capacity=event_manager.event_log.capacity,
    )


@router.get("/stream")
async def stream_events() -> EventSourceResponse:
    """
    Subscribe to live events via Server-Sent Events (SSE).

    The first frame is a welcome message; every accepted event follows as a
    ``data:`` frame, with ``: heartbeat`` comments in between.
    """
    return EventSourceResponse(
        event_manager.create_stream(),
        ping=TRANSPORT_PING_INTERVAL,
        send_timeout=settings.stream_send_timeout,
    )
