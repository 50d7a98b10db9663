"""
Pydantic DTOs for the Baton Event Service.
"""
from .schemas import (
    BaseDTO,
    DecodedPayload,
    Event,
    EventSource,
    HealthResponse,
    Severity,
    StreamStatusResponse,
    SystemMessage,
)

__all__ = [
    "BaseDTO",
    "DecodedPayload",
    "Event",
    "EventSource",
    "HealthResponse",
    "Severity",
    "StreamStatusResponse",
    "SystemMessage",
]
