"""
Event DTOs for baton status messages.

Field names are snake_case in Python and camelCase on the wire, so an Event
serializes as ``{"rawText": ..., "timestamp": ..., "decoded": ..., "isValid":
..., "source": ...}``.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BaseDTO(BaseModel):
    """
    Base configuration for all DTOs.

    - Aliases are generated in camelCase for JSON serialization.
    - Allows population by field name (snake_case) in Python code.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Severity(str, Enum):
    """Severity attached to a decoded baton message."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
    SUCCESS = "success"
    UNSPECIFIED = "unspecified"


class EventSource(str, Enum):
    """Ingestion entry point that produced an event."""
    LEGACY = "legacy"
    HOOKDECK = "hookdeck"
    DIRECT = "direct"


class DecodedPayload(BaseDTO):
    """Structured form of a 10-digit baton message."""
    model_config = ConfigDict(frozen=True)

    site_id: str = Field(..., description="4-character site code")
    message_code: str = Field(..., description="2-character message code")
    message_type: str = Field(..., description="Human label for the message code")
    severity: Severity = Field(..., description="Severity derived from the message code")
    baton_battery: int = Field(..., ge=0, le=99, description="Baton battery percentage")
    main_battery: int = Field(..., ge=0, le=99, description="Main unit battery percentage")
    description: str = Field(..., description="Human-readable summary")


class Event(BaseDTO):
    """
    A single accepted ingestion.

    Events are immutable; ``is_valid`` is true exactly when ``decoded`` is set.
    """
    model_config = ConfigDict(frozen=True)

    raw_text: str = Field(..., description="Trimmed message as received")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Ingestion instant (UTC)"
    )
    decoded: Optional[DecodedPayload] = Field(
        default=None,
        description="Decoded payload, absent when the message is not in protocol format"
    )
    source: EventSource = Field(..., description="Ingestion entry point")

    @property
    def is_valid(self) -> bool:
        return self.decoded is not None

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys, as sent to observers."""
        data = self.model_dump(mode="json", by_alias=True)
        data["isValid"] = self.is_valid
        return data


class SystemMessage(BaseDTO):
    """Service-originated stream message, such as the welcome on connect."""
    type: str = Field(default="system", description="Message kind")
    message: str = Field(..., description="Message text")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Time the message was produced (UTC)"
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")


class StreamStatusResponse(BaseModel):
    """Live stream and log occupancy."""
    subscribers: int = Field(..., description="Number of connected observers")
    events: int = Field(..., description="Events currently retained")
    capacity: int = Field(..., description="Maximum events retained")
