"""
Live fan-out of events to connected observers.

Each observer is a ``Subscriber`` holding a bounded FIFO of encoded SSE
frames. Publishing never waits on an observer: a frame that cannot be queued
immediately (queue full, or subscriber already closed) removes that
subscriber for good.

Frames on the wire::

    data: {"type": "system", "message": "connected", ...}\\n\\n   (welcome)
    data: {"type": "status", "subscribers": 2}\\n\\n            (status)
    data: {"rawText": "0024049886", ...}\\n\\n                  (event)
    : heartbeat\\n\\n                                           (keep-alive)
"""
import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict, Optional, Set
from uuid import uuid4

from sse_starlette.sse import ServerSentEvent

from ..models.schemas import Event, SystemMessage

logger = logging.getLogger(__name__)

DEFAULT_HEARTBEAT_INTERVAL = 15.0
DEFAULT_MAX_QUEUE_SIZE = 100

FRAME_SEP = "\n"


def encode_data(payload: Dict[str, Any]) -> bytes:
    """Encode a JSON payload as a single ``data:`` frame."""
    return ServerSentEvent(data=json.dumps(payload), sep=FRAME_SEP).encode()


HEARTBEAT_FRAME = ServerSentEvent(comment="heartbeat", sep=FRAME_SEP).encode()


class SubscriberClosed(Exception):
    """Raised when sending to a subscriber that has been torn down."""
    pass


class Subscriber:
    """
    Outbound channel to one observer.

    Frames are consumed in FIFO order with ``receive()`` or by iterating
    ``frames()``. After ``close()`` pending frames are discarded and the
    reader sees end-of-stream.
    """

    def __init__(self, max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE):
        self.id = str(uuid4())
        # None is the end-of-stream marker
        self._queue: asyncio.Queue[Optional[bytes]] = asyncio.Queue(maxsize=max_queue_size)
        self._closed = False
        self.heartbeat_task: Optional[asyncio.Task] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, frame: bytes) -> None:
        """
        Queue a frame without waiting.

        Raises:
            SubscriberClosed: If the subscriber has been closed
            asyncio.QueueFull: If the observer is not keeping up
        """
        if self._closed:
            raise SubscriberClosed(self.id)
        self._queue.put_nowait(frame)

    async def receive(self) -> Optional[bytes]:
        """Wait for the next frame; None once the subscriber is closed."""
        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    async def frames(self) -> AsyncIterator[bytes]:
        while True:
            frame = await self.receive()
            if frame is None:
                return
            yield frame

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
        self._queue.put_nowait(None)

    def __repr__(self) -> str:
        return f"Subscriber(id={self.id!r}, closed={self._closed})"


class Broadcaster:
    """
    Owns the set of live subscribers.

    Membership changes and fan-out are serialized by one lock. Nothing is
    awaited while the lock is held, so a slow observer can never hold up
    ingestion or other observers.
    """

    def __init__(
        self,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
        max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE,
        announce_status: bool = True,
    ):
        self._heartbeat_interval = heartbeat_interval
        self._max_queue_size = max_queue_size
        self._announce_status = announce_status
        self._subscribers: Set[Subscriber] = set()
        self._lock = asyncio.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def __contains__(self, subscriber: Subscriber) -> bool:
        return subscriber in self._subscribers

    async def subscribe(self) -> Subscriber:
        """
        Register a new observer.

        The welcome frame is queued before the subscriber joins the live
        set, so it always precedes any published event.
        """
        subscriber = Subscriber(max_queue_size=self._max_queue_size)
        subscriber.send(encode_data(SystemMessage(message="connected").to_wire()))

        async with self._lock:
            self._subscribers.add(subscriber)
            subscriber.heartbeat_task = asyncio.create_task(
                self._heartbeat(subscriber),
                name=f"heartbeat-{subscriber.id}",
            )
            if self._announce_status:
                self._fan_out(self._status_frame())
            count = len(self._subscribers)

        logger.info(f"Subscriber {subscriber.id} connected ({count} active)")
        return subscriber

    async def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove an observer and stop its heartbeat. Safe to call repeatedly."""
        async with self._lock:
            removed = self._detach(subscriber)
            if removed and self._announce_status:
                self._fan_out(self._status_frame())
            count = len(self._subscribers)

        if removed:
            logger.info(f"Subscriber {subscriber.id} disconnected ({count} active)")

    async def publish(self, event: Event) -> int:
        """
        Deliver an event to every live subscriber.

        Returns:
            Number of subscribers the event was queued for
        """
        frame = encode_data(event.to_wire())
        async with self._lock:
            return self._fan_out(frame)

    async def shutdown(self) -> None:
        """Disconnect every subscriber."""
        async with self._lock:
            for subscriber in list(self._subscribers):
                self._detach(subscriber)
        logger.info("Broadcaster shut down")

    def _fan_out(self, frame: bytes) -> int:
        # Caller holds the lock
        delivered = 0
        for subscriber in list(self._subscribers):
            try:
                subscriber.send(frame)
                delivered += 1
            except (asyncio.QueueFull, SubscriberClosed):
                logger.info(f"Dropping subscriber {subscriber.id}: write failed")
                self._detach(subscriber)
        return delivered

    def _detach(self, subscriber: Subscriber) -> bool:
        # Caller holds the lock
        if subscriber not in self._subscribers:
            subscriber.close()
            return False

        self._subscribers.discard(subscriber)
        task = subscriber.heartbeat_task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        subscriber.close()
        return True

    def _status_frame(self) -> bytes:
        return encode_data({"type": "status", "subscribers": len(self._subscribers)})

    async def _heartbeat(self, subscriber: Subscriber) -> None:
        """Send a keep-alive comment every interval while subscribed."""
        try:
            while True:
                await asyncio.sleep(self._heartbeat_interval)
                try:
                    subscriber.send(HEARTBEAT_FRAME)
                except (asyncio.QueueFull, SubscriberClosed):
                    logger.info(f"Dropping subscriber {subscriber.id}: heartbeat failed")
                    async with self._lock:
                        self._detach(subscriber)
                    return
        except asyncio.CancelledError:
            logger.debug(f"Heartbeat cancelled for subscriber {subscriber.id}")
            raise
