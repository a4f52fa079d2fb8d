import os
from pathlib import Path

from mealcrew.utilities.config import DATA_DIR

# Centralized file names for data files (single source of truth)
GROUPS_FILE = 'groups.json'
PLANS_FILE = 'plans.json'
MEALS_FILE = 'meals.json'
FORM_LINKS_FILE = 'form_links.json'
FORM_RESPONSES_FILE = 'form_responses.json'
SHOPPING_LISTS_FILE = 'shopping_lists.json'
SESSIONS_FILE = 'sessions.json'
SHARED_MEAL_LINKS_FILE = 'shared_meal_links.json'


def data_dir() -> Path:
    """Data directory; MEALCREW_DATA_DIR overrides the configured one at runtime."""
    override = os.getenv('MEALCREW_DATA_DIR')
    return Path(override).resolve() if override else Path(DATA_DIR).resolve()


def data_file(name: str) -> Path:
    return data_dir() / name


__all__ = ['GROUPS_FILE', 'PLANS_FILE', 'MEALS_FILE', 'FORM_LINKS_FILE', 'FORM_RESPONSES_FILE',
           'SHOPPING_LISTS_FILE', 'SESSIONS_FILE', 'SHARED_MEAL_LINKS_FILE', 'data_dir', 'data_file']
