"""Simple Event Bus / Observer implementation for plan persistence outcomes.

Event names used so far:
  plan.saved          -> payload {"filename": str}
  plan.created        -> payload {"filename": str}
  plan.selected       -> payload {"filename": str, "previous": str | None}
  plan.deleted        -> payload {"filename": str, "active": str}
  plan.write_failed   -> payload {"filename": str, "error": str}
  plan.not_found      -> payload {"filename": str, "error": str}
  storage.unavailable -> payload {"error": str}
  recipes.saved       -> payload {"filename": str, "slots_refreshed": int}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
from collections import defaultdict
from typing import Callable, Any, Dict, List
import logging

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PLAN_SAVED = "plan.saved"
PLAN_CREATED = "plan.created"
PLAN_SELECTED = "plan.selected"
PLAN_DELETED = "plan.deleted"
PLAN_WRITE_FAILED = "plan.write_failed"
PLAN_NOT_FOUND = "plan.not_found"
STORAGE_UNAVAILABLE = "storage.unavailable"
RECIPES_SAVED = "recipes.saved"

ALL_EVENTS = (
	PLAN_SAVED, PLAN_CREATED, PLAN_SELECTED, PLAN_DELETED,
	PLAN_WRITE_FAILED, PLAN_NOT_FOUND, STORAGE_UNAVAILABLE, RECIPES_SAVED,
)


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def publish(self, event_name: str, payload: Any = None):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception("Error delivering %s to %r", event_name, cb)


# Process-wide default bus (can be imported)
GLOBAL_EVENT_BUS = EventBus()


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'ALL_EVENTS',
	'PLAN_SAVED', 'PLAN_CREATED', 'PLAN_SELECTED', 'PLAN_DELETED',
	'PLAN_WRITE_FAILED', 'PLAN_NOT_FOUND', 'STORAGE_UNAVAILABLE', 'RECIPES_SAVED'
]
