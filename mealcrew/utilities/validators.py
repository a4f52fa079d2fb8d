"""
Input validation schemas using Pydantic for better data integrity.
"""
import re
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from mealcrew.utilities.constants import (
    DAYS, DEMOGRAPHIC_FIELDS, DIFFICULTIES, FORM_ROLES, INGREDIENT_CATEGORIES,
    MAX_COMMENT_LENGTH, MAX_MEALS_PER_GROUP, MAX_PER_DEMOGRAPHIC, MAX_PREP_TIME,
    MAX_SERVINGS, MAX_SHARE_DAYS, MIN_PREP_TIME, MIN_SERVINGS,
)

_SCRIPT_RE = re.compile(r'<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>', re.I)


def sanitize_comment(value: Optional[str]) -> Optional[str]:
    """Truncate to MAX_COMMENT_LENGTH and strip <script> blocks; empty -> None."""
    if value is None:
        return None
    text = _SCRIPT_RE.sub('', str(value)[:MAX_COMMENT_LENGTH])
    return text if text.strip() else None


def _clean_string_list(values: List[str], what: str) -> List[str]:
    cleaned = []
    for v in values:
        if not isinstance(v, str) or not v.strip():
            raise ValueError(f'All {what} must be non-empty strings')
        cleaned.append(v.strip())
    return cleaned


class GroupInput(BaseModel):
    """Schema for group create / replace."""
    name: str = Field(..., min_length=1, max_length=100)
    adults: int = Field(..., ge=0, le=MAX_PER_DEMOGRAPHIC)
    teens: int = Field(..., ge=0, le=MAX_PER_DEMOGRAPHIC)
    kids: int = Field(..., ge=0, le=MAX_PER_DEMOGRAPHIC)
    toddlers: int = Field(..., ge=0, le=MAX_PER_DEMOGRAPHIC)
    dietary_restrictions: List[str] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        if not v.strip():
            raise ValueError('Name is required')
        return v.strip()

    @field_validator('dietary_restrictions')
    @classmethod
    def validate_restrictions(cls, v):
        return _clean_string_list(v, 'dietary restrictions')

    @model_validator(mode='after')
    def at_least_one_person(self):
        if sum(getattr(self, f) for f in DEMOGRAPHIC_FIELDS) == 0:
            raise ValueError('Group must have at least one person')
        return self


class PlanInput(BaseModel):
    """Schema for plan creation."""
    name: str = Field(..., min_length=1, max_length=100)
    week_start: date
    group_ids: List[str] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        if not v.strip():
            raise ValueError('Name is required')
        return v.strip()

    @field_validator('week_start')
    @classmethod
    def not_in_past(cls, v):
        if v < date.today():
            raise ValueError('Week start cannot be in the past')
        return v

    @field_validator('group_ids')
    @classmethod
    def validate_group_ids(cls, v):
        return list(dict.fromkeys(_clean_string_list(v, 'group IDs')))


class PlanUpdateInput(BaseModel):
    """Partial plan update; only provided fields change."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    week_start: Optional[date] = None
    group_ids: Optional[List[str]] = Field(None, min_length=1)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('group_ids')
    @classmethod
    def validate_group_ids(cls, v):
        if v is None:
            return v
        return list(dict.fromkeys(_clean_string_list(v, 'group IDs')))


class GroupMealInput(BaseModel):
    group_id: str = Field(..., min_length=1)
    meal_count: int = Field(..., ge=1, le=MAX_MEALS_PER_GROUP)
    notes: Optional[str] = Field(None, max_length=500)


class GenerateMealsInput(BaseModel):
    group_meals: Optional[List[GroupMealInput]] = None
    additional_notes: Optional[str] = Field(None, max_length=500)


class FormLinkRequest(BaseModel):
    plan_id: str = Field(..., min_length=1)


class SharedMealsRequest(BaseModel):
    plan_id: str = Field(..., min_length=1)
    # 0 or missing: the link never expires
    expires_in_days: Optional[int] = Field(None, ge=0, le=MAX_SHARE_DAYS)


class FormResponseInput(BaseModel):
    """Public form submission. Selections map a weekday to the chosen meal ids."""
    token: str = Field(..., min_length=1, max_length=200)
    selections: Dict[str, List[str]]
    comments: Optional[str] = None
    idempotency_key: Optional[str] = Field(None, max_length=200)

    @field_validator('selections')
    @classmethod
    def validate_selections(cls, v):
        normalized: Dict[str, List[str]] = {}
        for day, meal_ids in v.items():
            key = day.strip().lower()
            if key not in DAYS:
                raise ValueError(f"Unknown day '{day}'")
            ids = _clean_string_list(meal_ids, 'meal IDs')
            normalized[key] = list(dict.fromkeys(normalized.get(key, []) + ids))
        return normalized

    @field_validator('comments')
    @classmethod
    def clean_comments(cls, v):
        return sanitize_comment(v)


class LoginInput(BaseModel):
    email: str = Field(..., min_length=3, max_length=254, pattern=r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

    @field_validator('email')
    @classmethod
    def normalize(cls, v):
        return v.strip().lower()


class NotificationsReadInput(BaseModel):
    ids: List[int] = Field(default_factory=list)
    all: bool = False


# -------------------- AI output validation --------------------
class GeneratedIngredient(BaseModel):
    name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    unit: str = Field(..., min_length=1)
    category: str
    notes: Optional[str] = None

    @field_validator('name', 'unit')
    @classmethod
    def strip_whitespace(cls, v):
        if not v.strip():
            raise ValueError('must not be blank')
        return v.strip()

    @field_validator('category')
    @classmethod
    def known_category(cls, v):
        v = v.strip().lower()
        if v not in INGREDIENT_CATEGORIES:
            raise ValueError(f'Unknown ingredient category: {v}')
        return v


class GeneratedMealInput(BaseModel):
    """Shape of one meal as returned by the model, before ids are assigned."""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    prep_time: int = Field(..., ge=MIN_PREP_TIME, le=MAX_PREP_TIME)
    cook_time: int = Field(..., ge=0)
    servings: int = Field(..., ge=MIN_SERVINGS, le=MAX_SERVINGS)
    ingredients: List[GeneratedIngredient] = Field(..., min_length=1)
    instructions: List[str] = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    dietary_info: List[str] = Field(default_factory=list)
    difficulty: str

    @field_validator('title', 'description')
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError('must not be blank')
        return v.strip()

    @field_validator('instructions', 'tags', 'dietary_info')
    @classmethod
    def non_empty_strings(cls, v):
        return _clean_string_list(v, 'entries')

    @field_validator('difficulty')
    @classmethod
    def known_difficulty(cls, v):
        v = v.strip().lower()
        if v not in DIFFICULTIES:
            raise ValueError(f'Unknown difficulty: {v}')
        return v


def parse_role(value: Optional[str]) -> Optional[str]:
    """Validate an optional role query parameter."""
    if value is None or value == '':
        return None
    if value not in FORM_ROLES:
        raise ValueError(f"Role must be one of: {', '.join(FORM_ROLES)}")
    return value
