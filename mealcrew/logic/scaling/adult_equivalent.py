"""Adult Equivalent (AE) arithmetic.

AE = adults*1.0 + teens*1.2 + kids*0.7 + toddlers*0.4

A group's AE is the weighted headcount recipe quantities are scaled by. A
plan covering several groups uses the sum of their AEs.
"""
from __future__ import annotations
from typing import Iterable, List

from mealcrew.utilities.constants import AE_WEIGHTS, DEMOGRAPHIC_FIELDS

__all__ = ["calculate_adult_equivalent", "plan_adult_equivalent", "validate_demographics", "scale_quantity"]


def calculate_adult_equivalent(adults: int = 0, teens: int = 0, kids: int = 0, toddlers: int = 0) -> float:
    """Weighted headcount rounded to one decimal (absorbs float noise such as 0.7*3)."""
    result = (
        adults * AE_WEIGHTS["adults"]
        + teens * AE_WEIGHTS["teens"]
        + kids * AE_WEIGHTS["kids"]
        + toddlers * AE_WEIGHTS["toddlers"]
    )
    return round(result, 1)


def plan_adult_equivalent(groups: Iterable) -> float:
    """Sum of AEs over the given groups (objects or dicts with demographic counts)."""
    total = 0.0
    for g in groups:
        counts = g if isinstance(g, dict) else g.demographics()
        total += calculate_adult_equivalent(*(int(counts.get(f) or 0) for f in DEMOGRAPHIC_FIELDS))
    return round(total, 1)


def validate_demographics(adults, teens, kids, toddlers) -> List[str]:
    errors: List[str] = []
    values = dict(zip(DEMOGRAPHIC_FIELDS, (adults, teens, kids, toddlers)))
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            errors.append(f"{key} must be a non-negative integer")
    if not errors and sum(values.values()) == 0:
        errors.append("Group must have at least one person")
    return errors


def scale_quantity(amount: float, servings: int, adult_equivalent: float) -> float:
    """Scale a recipe amount written for `servings` people to `adult_equivalent` portions."""
    base = servings if servings and servings > 0 else 1
    return round(float(amount) / base * adult_equivalent, 2)
