"""Simple Event Bus / Observer implementation for plan workflow events.

Event names:
  form_links.issued         -> {"plan": Plan, "links": [FormLink], "created": int}
  form_links.revoked        -> {"plan": Plan, "links": [FormLink], "role": str | None}
  form.response_submitted   -> {"plan": Plan, "response": FormResponse}
  plan.finalized            -> {"plan": Plan, "selections_applied": int, "shopping_list_items": int}
  meals.generated           -> {"plan": Plan, "total_meals": int, "errors": list}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
FORM_LINKS_ISSUED = "form_links.issued"
FORM_LINKS_REVOKED = "form_links.revoked"
FORM_RESPONSE_SUBMITTED = "form.response_submitted"
PLAN_FINALIZED = "plan.finalized"
MEALS_GENERATED = "meals.generated"

ALL_EVENTS = (FORM_LINKS_ISSUED, FORM_LINKS_REVOKED, FORM_RESPONSE_SUBMITTED, PLAN_FINALIZED, MEALS_GENERATED)


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback in self._subscribers.get(event_name, []):
			self._subscribers[event_name].remove(callback)

	def publish(self, event_name: str, payload: Any):
		# a failing subscriber must not break the request that published the event
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception("Error delivering %s to %r", event_name, cb)


GLOBAL_EVENT_BUS = EventBus()


def publish(event_name: str, payload: Any = None) -> None:
	"""Publish an event on the global bus."""
	GLOBAL_EVENT_BUS.publish(event_name, payload)


__all__ = [
	"EventBus", "GLOBAL_EVENT_BUS", "publish", "ALL_EVENTS",
	"FORM_LINKS_ISSUED", "FORM_LINKS_REVOKED", "FORM_RESPONSE_SUBMITTED", "PLAN_FINALIZED", "MEALS_GENERATED",
]
