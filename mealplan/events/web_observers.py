"""Web-facing observers for plan persistence events.

This module subscribes to an EventBus for every plan/storage event and stores
a lightweight in-memory ring buffer of recent events that the web layer
(FastAPI endpoint) returns to the UI, so save failures and deletions show up
as non-blocking notices without a page reload.

Design:
  * Each event stored with an auto-increment integer id (cursor) so clients
    can request only newer events (since=<last_id_seen>).
  * A Lock guards the buffer; the debounce timer publishes from its own thread.
  * A MAX_EVENTS cap prevents unbounded memory growth.
"""
from __future__ import annotations
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone
import logging
import weakref

from .Event_Bus import GLOBAL_EVENT_BUS, ALL_EVENTS, EventBus

logger = logging.getLogger(__name__)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300  # keep a few hundred recent events
_started_on: "weakref.WeakSet[EventBus]" = weakref.WeakSet()  # buses already observed


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        }
        # Copy the plain fields the UI shows
        if isinstance(payload, dict):
            for k in ('filename', 'previous', 'active', 'error', 'slots_refreshed'):
                if k in payload:
                    evt[k] = payload[k]
        _events.append(evt)
        _next_id += 1
        # Trim buffer
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start(bus: EventBus = GLOBAL_EVENT_BUS):
    """Idempotent start: subscribe observers once per bus."""
    if bus in _started_on:
        return
    for name in ALL_EVENTS:
        bus.subscribe(name, _record)
    _started_on.add(bus)
    logger.debug("Web observers subscribed to %d event types", len(ALL_EVENTS))


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive).

    If since is None, returns the last N (up to MAX_EVENTS) events.
    Response includes next_cursor (largest id) so client can poll with since=next_cursor.
    """
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events']
