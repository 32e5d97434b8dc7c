"""
backend/app/services/events.py

Event emitter: pushes events to a Redis list consumed by the mailer worker.

Queue: settings.events_queue (default `events:p2p`), instant delivery.
Emission is best-effort: failures are logged and swallowed, callers never
see them.
"""

import json
import logging
import time

from ..config import settings
from ..redis_client import redis_client

logger = logging.getLogger(__name__)


def emit_event(event_type: str, payload: dict) -> bool:
    """
    Push an event onto the queue.

    Returns True when the event was queued, False when it was dropped.
    """
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(settings.events_queue, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {settings.events_queue}")
        return True
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False
