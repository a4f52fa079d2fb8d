"""Manager notifications built from plan workflow events.

This module subscribes to the GLOBAL_EVENT_BUS for the workflow events and
keeps a small in-memory feed per plan owner that the web layer can poll:

  * Each notification gets an auto-increment integer id (cursor) so clients
    can ask only for newer entries (since=<last_id_seen>).
  * A Lock guards the feeds; with several worker processes each keeps its
    own feed, which is fine for non-critical notifications.
  * MAX_PER_OWNER caps each feed.
"""
from __future__ import annotations
import logging
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

from mealcrew.utilities.clock import format_ts, utcnow
from mealcrew.utilities.constants import ROLE_CO_MANAGER
from .Event_Bus import (
    GLOBAL_EVENT_BUS, FORM_LINKS_ISSUED, FORM_LINKS_REVOKED, FORM_RESPONSE_SUBMITTED,
    PLAN_FINALIZED, MEALS_GENERATED,
)

logger = logging.getLogger(__name__)

_lock = Lock()
_feeds: Dict[str, List[Dict[str, Any]]] = {}
_next_id = 1
MAX_PER_OWNER = 200
_started = False


def _message(event_name: str, payload: dict) -> Optional[str]:
    plan = payload.get('plan')
    name = getattr(plan, 'name', '') or 'your plan'
    if event_name == FORM_LINKS_ISSUED:
        if not payload.get('created'):
            return None
        return f"New form links are ready for \"{name}\""
    if event_name == FORM_LINKS_REVOKED:
        role = payload.get('role')
        if role:
            return f"The {role.replace('_', '-')} link for \"{name}\" was revoked"
        return f"The form links for \"{name}\" were revoked"
    if event_name == FORM_RESPONSE_SUBMITTED:
        response = payload.get('response')
        who = "The co-manager" if getattr(response, 'role', '') == ROLE_CO_MANAGER else "A participant"
        return f"{who} submitted meal selections for \"{name}\""
    if event_name == PLAN_FINALIZED:
        return (f"\"{name}\" was finalized with {payload.get('selections_applied', 0)} days selected "
                f"and {payload.get('shopping_list_items', 0)} shopping list items")
    if event_name == MEALS_GENERATED:
        return f"{payload.get('total_meals', 0)} meal options were generated for \"{name}\""
    return None


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    if not isinstance(payload, dict):
        return
    plan = payload.get('plan')
    owner = getattr(plan, 'user_id', None)
    message = _message(event_name, payload)
    if not owner or not message:
        return
    with _lock:
        note = {
            'id': _next_id,
            'type': event_name,
            'plan_id': getattr(plan, 'id', None),
            'message': message,
            'ts': format_ts(utcnow()),
            'read': False,
        }
        response = payload.get('response')
        if response is not None:
            note['role'] = getattr(response, 'role', None)
        feed = _feeds.setdefault(owner, [])
        feed.append(note)
        _next_id += 1
        if len(feed) > MAX_PER_OWNER:
            del feed[: len(feed) - MAX_PER_OWNER]
    logger.debug("Notification %s for %s: %s", note['id'], owner, message)


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for event_name in (FORM_LINKS_ISSUED, FORM_LINKS_REVOKED, FORM_RESPONSE_SUBMITTED,
                       PLAN_FINALIZED, MEALS_GENERATED):
        GLOBAL_EVENT_BUS.subscribe(event_name, _record)
    _started = True


def get_notifications(user_id: str, since: Optional[int] = None, limit: int = 50,
                      unread_only: bool = False) -> Dict[str, Any]:
    """Newest-first notifications of one owner, newer than `since` (exclusive).

    next_cursor is the largest id in the owner's feed so clients can poll with since=next_cursor.
    """
    with _lock:
        feed = list(_feeds.get(user_id, []))
    data = [n for n in feed if since is None or n['id'] > since]
    if unread_only:
        data = [n for n in data if not n['read']]
    unread = sum(1 for n in feed if not n['read'])
    data = [dict(n) for n in reversed(data)][:max(limit, 0)]
    next_cursor = feed[-1]['id'] if feed else (since or 0)
    return {'notifications': data, 'unread_count': unread, 'next_cursor': next_cursor}


def mark_read(user_id: str, ids: Iterable[int] = (), mark_all: bool = False) -> int:
    """Mark notifications read; returns how many changed."""
    wanted = set(ids)
    changed = 0
    with _lock:
        for note in _feeds.get(user_id, []):
            if note['read']:
                continue
            if mark_all or note['id'] in wanted:
                note['read'] = True
                changed += 1
    return changed


def clear():
    global _next_id
    with _lock:
        _feeds.clear()
        _next_id = 1


__all__ = ['start', 'get_notifications', 'mark_read', 'clear', 'MAX_PER_OWNER']
