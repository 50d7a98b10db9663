"""
Owner of the event log and the live subscriber set.
"""
import asyncio
import logging
from typing import AsyncGenerator, List, Optional

from ..core.config import settings
from ..models.schemas import Event, EventSource
from .broadcaster import Broadcaster
from .event_log import EventLog
from .ingestion import IngestionGateway, IngestResult

logger = logging.getLogger(__name__)


class EventManager:
    """
    Manages the event log, the broadcaster and the ingestion pipeline.
    Singleton-like service shared by all routes.
    """

    def __init__(
        self,
        max_events: int = settings.max_events,
        heartbeat_interval: float = settings.stream_heartbeat_interval,
        max_queue_size: int = settings.stream_max_queue_size,
        announce_status: bool = settings.stream_announce_status,
    ):
        self.event_log = EventLog(capacity=max_events)
        self.broadcaster = Broadcaster(
            heartbeat_interval=heartbeat_interval,
            max_queue_size=max_queue_size,
            announce_status=announce_status,
        )
        self.gateway = IngestionGateway(self.event_log, self.broadcaster)

    async def initialize(self) -> None:
        logger.info(
            f"Starting {settings.service_name} "
            f"(capacity: {self.event_log.capacity}, "
            f"heartbeat: {settings.stream_heartbeat_interval}s)"
        )

    async def shutdown(self) -> None:
        """Disconnect all observers and drop the volatile log."""
        logger.info("Shutting down event manager")
        await self.broadcaster.shutdown()
        self.event_log.clear()
        logger.info("Event manager shutdown complete")

    async def ingest(self, raw_text: Optional[str], source: EventSource) -> IngestResult:
        return await self.gateway.ingest(raw_text, source)

    def recent(self, limit: int) -> List[Event]:
        return self.event_log.recent(limit)

    async def create_stream(self) -> AsyncGenerator[bytes, None]:
        """
        Create an SSE stream generator for one observer.

        The subscriber is registered when the generator starts and removed
        when it finishes, whether the client went away or the subscriber was
        dropped for falling behind.
        """
        subscriber = await self.broadcaster.subscribe()
        try:
            async for frame in subscriber.frames():
                yield frame
        except asyncio.CancelledError:
            logger.info(f"Stream cancelled for subscriber {subscriber.id}")
            raise
        finally:
            await self.broadcaster.unsubscribe(subscriber)


# Global instance
event_manager = EventManager()
