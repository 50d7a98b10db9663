"""
Ingestion gateway: raw text in, logged and broadcast event out.

Every entry point runs the same pipeline; only the acknowledgment and
rejection bodies differ per source, and those live in ``ACK_POLICIES``.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from ..models.schemas import Event, EventSource
from .broadcaster import Broadcaster
from .decoder import decode
from .event_log import EventLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AckPolicy:
    """Response bodies for one ingestion source."""
    accepted: Dict[str, str]
    rejected: Dict[str, str]


ACK_POLICIES: Dict[EventSource, AckPolicy] = {
    # Existing device integrations depend on these exact bodies
    EventSource.LEGACY: AckPolicy(
        accepted={"status": "ok"},
        rejected={"status": "error", "message": "No raw string received"},
    ),
    EventSource.HOOKDECK: AckPolicy(
        accepted={"status": "received"},
        rejected={"error": "No message received"},
    ),
    EventSource.DIRECT: AckPolicy(
        accepted={"status": "received"},
        rejected={"error": "No message received"},
    ),
}


class IngestionError(Exception):
    """Base exception for ingestion failures."""
    pass


class EmptyPayloadError(IngestionError):
    """Raised when a request carries no usable text."""

    def __init__(self, source: EventSource, body: Dict[str, str]):
        super().__init__(f"No payload received from {source.value} source")
        self.source = source
        self.body = body


@dataclass(frozen=True)
class IngestResult:
    """Outcome of a successful ingestion."""
    event: Event
    body: Dict[str, str] = field(default_factory=dict)
    delivered: int = 0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IngestionGateway:
    """
    Normalizes raw input and drives it through decode, log and broadcast.

    Messages that do not decode are still accepted; they are stored and
    broadcast with ``isValid`` false.
    """

    def __init__(
        self,
        event_log: EventLog,
        broadcaster: Broadcaster,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._log = event_log
        self._broadcaster = broadcaster
        self._clock = clock or utc_now

    async def ingest(self, raw_text: Optional[str], source: EventSource) -> IngestResult:
        """
        Ingest one raw message.

        Args:
            raw_text: Request body as text
            source: Entry point the message arrived on

        Returns:
            IngestResult with the stored event and the acknowledgment body

        Raises:
            EmptyPayloadError: If the body is empty after trimming
        """
        policy = ACK_POLICIES[source]
        text = raw_text.strip() if raw_text else ""
        if not text:
            logger.warning(f"Rejected empty payload from {source.value} source")
            raise EmptyPayloadError(source, dict(policy.rejected))

        logger.info(f"RAW EVENT [{source.value}]: {text}")

        decoded = decode(text)
        event = self._log.append(Event(
            raw_text=text,
            timestamp=self._clock(),
            decoded=decoded,
            source=source,
        ))

        if decoded is None:
            logger.debug(f"Message from {source.value} source did not decode: {text!r}")
        else:
            logger.info(f"Decoded: {decoded.description}")

        delivered = await self._broadcaster.publish(event)
        return IngestResult(event=event, body=dict(policy.accepted), delivered=delivered)
