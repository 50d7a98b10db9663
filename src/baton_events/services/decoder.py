"""
Decoder for the fixed-width baton message protocol.

A protocol message is exactly ten ASCII digits::

    SSSS CC BB MM
    |    |  |  +-- main unit battery (00-99)
    |    |  +----- baton battery (00-99)
    |    +-------- message code
    +------------- site id

Anything else is not an error; it simply does not decode.
"""
import re
from typing import Dict, NamedTuple, Optional

from ..models.schemas import DecodedPayload, Severity

MESSAGE_PATTERN = re.compile(r"[0-9]{10}")


class MessageClass(NamedTuple):
    message_type: str
    severity: Severity


# Message code -> classification
MESSAGE_CODES: Dict[str, MessageClass] = {
    "01": MessageClass("Panic", Severity.CRITICAL),
    "02": MessageClass("Patrol Fail", Severity.WARNING),
    "03": MessageClass("Patrol Start", Severity.INFO),
    "04": MessageClass("Fire", Severity.CRITICAL),
    "05": MessageClass("Medical", Severity.WARNING),
    "06": MessageClass("Patrol Complete", Severity.SUCCESS),
}

UNKNOWN_SEVERITY = Severity.INFO


def classify(message_code: str) -> MessageClass:
    """Look up a message code, falling back to an ``Unknown (<code>)`` label."""
    known = MESSAGE_CODES.get(message_code)
    if known is not None:
        return known
    return MessageClass(f"Unknown ({message_code})", UNKNOWN_SEVERITY)


def describe(message_type: str, site_id: str, baton_battery: int, main_battery: int) -> str:
    return f"{message_type} from site {site_id} — Batteries: {baton_battery}% / {main_battery}%"


def decode(raw_text: str) -> Optional[DecodedPayload]:
    """
    Decode a raw baton message.

    Args:
        raw_text: Message text, already trimmed by the caller

    Returns:
        DecodedPayload if the text is exactly ten ASCII digits, otherwise None
    """
    if not MESSAGE_PATTERN.fullmatch(raw_text):
        return None

    site_id = raw_text[0:4]
    message_code = raw_text[4:6]
    baton_battery = int(raw_text[6:8])
    main_battery = int(raw_text[8:10])
    message_type, severity = classify(message_code)

    return DecodedPayload(
        site_id=site_id,
        message_code=message_code,
        message_type=message_type,
        severity=severity,
        baton_battery=baton_battery,
        main_battery=main_battery,
        description=describe(message_type, site_id, baton_battery, main_battery),
    )
