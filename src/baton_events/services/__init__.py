"""
Service layer: decoding, event log, fan-out and ingestion.
"""
from .broadcaster import Broadcaster, Subscriber
from .decoder import MESSAGE_CODES, classify, decode
from .event_log import MAX_EVENTS, EventLog
from .ingestion import (
    ACK_POLICIES,
    EmptyPayloadError,
    IngestionError,
    IngestionGateway,
    IngestResult,
)

__all__ = [
    "ACK_POLICIES",
    "Broadcaster",
    "EmptyPayloadError",
    "EventLog",
    "IngestionError",
    "IngestionGateway",
    "IngestResult",
    "MAX_EVENTS",
    "MESSAGE_CODES",
    "Subscriber",
    "classify",
    "decode",
]
