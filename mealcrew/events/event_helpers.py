"""Event helper utilities.

Thin wrappers that publish the plan workflow events on the global bus, so
route code does not build payload dicts by hand.

Quick import:
    from mealcrew.events.event_helpers import (
        publish_links_issued, publish_links_revoked, publish_response_submitted,
        publish_plan_finalized, publish_meals_generated,
    )
"""
from __future__ import annotations
from typing import Any, Iterable, Optional

from .Event_Bus import (
    publish, FORM_LINKS_ISSUED, FORM_LINKS_REVOKED, FORM_RESPONSE_SUBMITTED,
    PLAN_FINALIZED, MEALS_GENERATED,
)

__all__ = [
    'publish_links_issued', 'publish_links_revoked', 'publish_response_submitted',
    'publish_plan_finalized', 'publish_meals_generated',
]


def publish_links_issued(plan: Any, links: Iterable[Any], created: int):
    publish(FORM_LINKS_ISSUED, {'plan': plan, 'links': list(links), 'created': created})


def publish_links_revoked(plan: Any, links: Iterable[Any], role: Optional[str] = None):
    publish(FORM_LINKS_REVOKED, {'plan': plan, 'links': list(links), 'role': role})


def publish_response_submitted(plan: Any, response: Any):
    publish(FORM_RESPONSE_SUBMITTED, {'plan': plan, 'response': response})


def publish_plan_finalized(plan: Any, selections_applied: int, shopping_list_items: int):
    publish(PLAN_FINALIZED, {
        'plan': plan,
        'selections_applied': selections_applied,
        'shopping_list_items': shopping_list_items,
    })


def publish_meals_generated(plan: Any, total_meals: int, errors: Optional[list] = None):
    publish(MEALS_GENERATED, {'plan': plan, 'total_meals': total_meals, 'errors': errors or []})
