"""
Pytest configuration for Baton Event Service tests.
"""
import os

# Set test environment variables before the app is imported
os.environ["DEBUG"] = "true"
os.environ["STREAM_ANNOUNCE_STATUS"] = "false"
# Short enough for stream tests to observe heartbeats
os.environ["STREAM_HEARTBEAT_INTERVAL"] = "0.2"

import pytest

from baton_events.services.broadcaster import Broadcaster
from baton_events.services.event_log import EventLog


@pytest.fixture
def event_log():
    return EventLog(capacity=1000)


@pytest.fixture
async def broadcaster():
    """Broadcaster with a long heartbeat so tests see only the frames they cause."""
    broadcaster = Broadcaster(heartbeat_interval=60, max_queue_size=10, announce_status=False)
    yield broadcaster
    await broadcaster.shutdown()
