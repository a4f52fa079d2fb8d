"""Merging form responses into a plan's final selections.

The most recent co_manager response is laid over the most recent other
response, day by day. A day picked by the co_manager replaces that day
entirely; days only the other respondent chose are kept.
"""
from typing import Dict, Iterable, List, Optional

from mealcrew.domain.FormResponse import FormResponse
from mealcrew.utilities.constants import DAYS, ROLE_CO_MANAGER, ROLE_OTHER

__all__ = ['latest_response', 'resolve_selections', 'selections_to_plan_meals', 'resolution_summary']


def latest_response(responses: Iterable[FormResponse], role: str) -> Optional[FormResponse]:
    latest = None
    # iteration order is storage order, so >= lets the later-stored one win ties
    for response in responses:
        if response.role != role:
            continue
        if latest is None or response.submitted_at >= latest.submitted_at:
            latest = response
    return latest


def resolve_selections(responses: Iterable[FormResponse]) -> Dict[str, List[str]]:
    responses = list(responses)
    merged: Dict[str, List[str]] = {}
    other = latest_response(responses, ROLE_OTHER)
    co_manager = latest_response(responses, ROLE_CO_MANAGER)
    if other is not None:
        merged.update({day: list(ids) for day, ids in other.selections.items()})
    if co_manager is not None:
        merged.update({day: list(ids) for day, ids in co_manager.selections.items()})
    return {day: merged[day] for day in _day_order(merged)}


def _day_order(selections: Dict[str, List[str]]) -> List[str]:
    known = [d for d in DAYS if d in selections]
    return known + sorted(d for d in selections if d not in DAYS)


def selections_to_plan_meals(plan_id: str, selections: Dict[str, List[str]]) -> List[dict]:
    """Flatten day -> meal ids into plan meal rows, one per (day, meal_id)."""
    rows = []
    seen = set()
    for day in _day_order(selections):
        for meal_id in selections[day]:
            if (day, meal_id) in seen:
                continue
            seen.add((day, meal_id))
            rows.append({"plan_id": plan_id, "day": day, "meal_id": meal_id})
    return rows


def resolution_summary(responses: Iterable[FormResponse]) -> dict:
    """What finalizing right now would produce; used for the manager's preview."""
    responses = list(responses)
    co_manager = latest_response(responses, ROLE_CO_MANAGER)
    other = latest_response(responses, ROLE_OTHER)
    selections = resolve_selections(responses)
    overridden = []
    if co_manager is not None and other is not None:
        overridden = [d for d in _day_order(other.selections)
                      if d in co_manager.selections and co_manager.selections[d] != other.selections[d]]
    return {
        "selections": selections,
        "co_manager_response_id": co_manager.id if co_manager else None,
        "other_response_id": other.id if other else None,
        "overridden_days": overridden,
    }
