"""Meal generation for a plan.

One model call per group. The model is asked for the requested number of
meals plus a small extra allowance, the output is repaired and parsed, and
each meal is validated before it is stored. Without an OpenAI key the
offline library in mock_meals is used instead.
"""
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from openai import OpenAI
from pydantic import ValidationError

from mealcrew.domain.Ingredient import Ingredient
from mealcrew.domain.Meal import Meal
from mealcrew.logic.generation.json_repair import looks_truncated, parse_model_json, strip_code_fences
from mealcrew.logic.generation.mock_meals import mock_meals
from mealcrew.utilities.config import OPENAI_MODEL
from mealcrew.utilities.constants import (
    DEFAULT_EXTRA_MEALS, DEFAULT_MEALS_PER_GROUP, DIETARY_RESTRICTION_PROMPTS,
    INGREDIENT_CATEGORIES, MAX_GENERATION_RETRIES, MAX_MEALS_PER_GROUP, MEAL_JSON_FORMAT,
    SYSTEM_PROMPT,
)
from mealcrew.utilities.validators import GeneratedMealInput

logger = logging.getLogger(__name__)


class MealGenerationError(Exception):
    def __init__(self, message: str, code: str = "GENERATION_FAILED", group_id: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.group_id = group_id

    def to_dict(self) -> dict:
        out = {"code": self.code, "message": str(self)}
        if self.group_id:
            out["group_id"] = self.group_id
        return out


@dataclass
class GroupContext:
    group_id: str
    group_name: str
    demographics: Dict[str, int]
    dietary_restrictions: List[str]
    meal_count_requested: int
    adult_equivalent: float
    group_notes: Optional[str] = None

    @property
    def meals_to_generate(self) -> int:
        return self.meal_count_requested + DEFAULT_EXTRA_MEALS


@dataclass
class GroupMealOptions:
    group_id: str
    group_name: str
    requested_count: int
    adult_equivalent: float
    meals: List[Meal] = field(default_factory=list)

    @property
    def generated_count(self) -> int:
        return len(self.meals)

    def to_dict(self) -> dict:
        return {
            "group_id": self.group_id,
            "group_name": self.group_name,
            "requested_count": self.requested_count,
            "generated_count": self.generated_count,
            "adult_equivalent": self.adult_equivalent,
            "meals": [m.to_dict() for m in self.meals],
        }


def _get_openai_client():
    """Return an OpenAI client if OPENAI_API_KEY is set, otherwise None."""
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        return None
    return OpenAI(api_key=api_key)


def build_group_contexts(groups, group_meals=None) -> List[GroupContext]:
    """Contexts for the plan's groups.

    Without explicit group_meals every group gets DEFAULT_MEALS_PER_GROUP;
    otherwise only the listed groups are included, with their counts and notes.
    """
    by_id = {g.id: g for g in groups}
    if not group_meals:
        requests = [{"group_id": g.id, "meal_count": DEFAULT_MEALS_PER_GROUP, "notes": None} for g in groups]
    else:
        requests = [gm if isinstance(gm, dict) else gm.model_dump() for gm in group_meals]

    contexts = []
    for req in requests:
        group = by_id.get(req["group_id"])
        if group is None:
            continue
        contexts.append(GroupContext(
            group_id=group.id,
            group_name=group.name,
            demographics=group.demographics(),
            dietary_restrictions=list(group.dietary_restrictions),
            meal_count_requested=int(req["meal_count"]),
            adult_equivalent=group.adult_equivalent,
            group_notes=req.get("notes"),
        ))
    return contexts


def validate_plan_for_generation(plan, groups, group_meals=None) -> List[str]:
    """Problems that prevent generation; an empty list means the plan is ready."""
    errors = []
    if not plan.group_ids:
        errors.append("Plan has no groups")
        return errors
    known = {g.id for g in groups}
    missing = [gid for gid in plan.group_ids if gid not in known]
    if missing:
        errors.append(f"Groups not found: {', '.join(missing)}")
    for gm in group_meals or []:
        gid = gm["group_id"] if isinstance(gm, dict) else gm.group_id
        count = gm["meal_count"] if isinstance(gm, dict) else gm.meal_count
        if gid not in plan.group_ids:
            errors.append(f"Group {gid} is not part of this plan")
        elif count + DEFAULT_EXTRA_MEALS > MAX_MEALS_PER_GROUP:
            errors.append(
                f"Cannot generate {count + DEFAULT_EXTRA_MEALS} meals for group {gid}. "
                f"Maximum is {MAX_MEALS_PER_GROUP}"
            )
    return errors


def build_prompt(context: GroupContext, week_start, additional_notes: Optional[str] = None) -> str:
    if context.dietary_restrictions:
        dietary = " ".join(
            DIETARY_RESTRICTION_PROMPTS.get(r.strip().lower(), r) for r in context.dietary_restrictions
        )
    else:
        dietary = "No specific dietary restrictions."
    d = context.demographics
    demo = (f"{d.get('adults', 0)} adults, {d.get('teens', 0)} teens, {d.get('kids', 0)} kids, "
            f"{d.get('toddlers', 0)} toddlers ({context.adult_equivalent} adult equivalents)")
    family = "\n- Family-friendly options, kids/toddlers are present" if d.get('kids') or d.get('toddlers') else ""
    return (
        f'Generate {context.meals_to_generate} meal options for "{context.group_name}" with {demo}.\n\n'
        f"DIETARY REQUIREMENTS: {dietary}\n\n"
        f"CONTEXT:\n"
        f"- Week starting: {week_start}\n"
        f"- Group notes: {context.group_notes or 'None specified'}\n"
        f"- Plan notes: {additional_notes or 'None specified'}\n\n"
        f"REQUIREMENTS:\n"
        f"- Each meal has title, brief description (max 15 words), prep_time, cook_time, servings, "
        f"ingredients (max 6 per meal), instructions (max 3 steps), tags, dietary_info and difficulty\n"
        f"- Ingredient categories: {', '.join(INGREDIENT_CATEGORIES)}\n"
        f"- Base servings should be 4-6 people, ingredients will be scaled later\n"
        f"- Variety in cuisine types and cooking methods{family}\n\n"
        f"Return ONLY valid JSON in this exact format:{MEAL_JSON_FORMAT}"
    )


def to_meals(raw_meals, context: GroupContext, plan_id: str) -> List[Meal]:
    """Validate raw meal dicts; invalid ones are dropped with a log line."""
    meals = []
    for raw in raw_meals or []:
        try:
            data = GeneratedMealInput.model_validate(raw)
        except ValidationError as e:
            logger.info("Dropping invalid meal for group %s: %s", context.group_name, e.errors()[:1])
            continue
        meals.append(Meal(
            id=str(uuid4()),
            plan_id=plan_id,
            group_id=context.group_id,
            group_name=context.group_name,
            title=data.title,
            description=data.description,
            prep_time=data.prep_time,
            cook_time=data.cook_time,
            servings=data.servings,
            ingredients=[Ingredient(**i.model_dump()) for i in data.ingredients],
            instructions=data.instructions,
            tags=data.tags,
            dietary_info=data.dietary_info,
            difficulty=data.difficulty,
        ))
    return meals[:context.meals_to_generate]


class MealGenerator:
    def __init__(self, client=None, model: str = OPENAI_MODEL, max_retries: int = MAX_GENERATION_RETRIES,
                 sleep: Callable[[float], None] = time.sleep, use_default_client: bool = True):
        self.client = client if client is not None or not use_default_client else _get_openai_client()
        self.model = model
        self.max_retries = max_retries
        self._sleep = sleep
        self.api_calls = 0

    @property
    def offline(self) -> bool:
        return self.client is None

    def _call(self, prompt: str) -> str:
        self.api_calls += 1
        response = self.client.responses.create(model=self.model, instructions=SYSTEM_PROMPT, input=prompt)
        return (response.output_text or "").strip()

    def _request_json_fix(self, previous_output: str) -> Optional[str]:
        """Ask the model to reformat previous_output as strict JSON."""
        prompt = (
            "The previous response contained meal options but was not valid JSON. "
            "Reformat ONLY the meals as valid JSON (no surrounding text) using the same keys. "
            "Here is the original output:\n\n" + previous_output
        )
        try:
            return self._call(prompt)
        except Exception:
            logger.exception("Error while requesting AI to fix JSON formatting")
            return None

    def _request_meals(self, prompt: str) -> list:
        text = self._call(prompt)
        if not text:
            raise MealGenerationError("AI returned an empty response")
        parsed = parse_model_json(text)
        if parsed is None:
            if looks_truncated(text):
                raise MealGenerationError(f"AI response appears to be truncated ({len(text)} chars)")
            fixed = self._request_json_fix(text)
            parsed = parse_model_json(strip_code_fences(fixed or ""))
        if not isinstance(parsed, dict) or not isinstance(parsed.get("meals"), list):
            raise MealGenerationError("AI response missing meals array")
        return parsed["meals"]

    def generate_for_group(self, context: GroupContext, plan_id: str, week_start,
                           additional_notes: Optional[str] = None) -> List[Meal]:
        if self.offline:
            meals = to_meals(mock_meals(context.meals_to_generate, context.dietary_restrictions), context, plan_id)
            if not meals:
                raise MealGenerationError("No offline meals match the group's dietary restrictions",
                                          code="GROUP_GENERATION_FAILED", group_id=context.group_id)
            return meals

        prompt = build_prompt(context, week_start, additional_notes)
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                meals = to_meals(self._request_meals(prompt), context, plan_id)
                if meals:
                    return meals
                last_error = MealGenerationError("No valid meals were generated")
            except MealGenerationError as e:
                last_error = e
            except Exception as e:
                logger.warning("OpenAI call failed for group %s (attempt %d): %s", context.group_name, attempt, e)
                last_error = e
            if attempt < self.max_retries:
                # exponential backoff: 1s, 2s, 4s...
                self._sleep(2 ** (attempt - 1))
        raise MealGenerationError(
            f"Failed to generate meals for {context.group_name} after {self.max_retries} attempts: {last_error}",
            code="GROUP_GENERATION_FAILED", group_id=context.group_id,
        )

    def generate_for_plan(self, plan, contexts: List[GroupContext],
                          additional_notes: Optional[str] = None) -> dict:
        """Generate per group. Groups that fail are reported in `errors`; if none succeed, raise."""
        started = time.monotonic()
        options: List[GroupMealOptions] = []
        errors: List[dict] = []
        if not contexts:
            raise MealGenerationError("No groups found in plan", code="NO_GROUPS")

        notes = additional_notes or plan.notes or None
        for context in contexts:
            try:
                meals = self.generate_for_group(context, plan.id, plan.week_start, notes)
            except MealGenerationError as e:
                logger.warning("Meal generation failed for group %s: %s", context.group_name, e)
                errors.append(e.to_dict())
                continue
            options.append(GroupMealOptions(
                group_id=context.group_id,
                group_name=context.group_name,
                requested_count=context.meal_count_requested,
                adult_equivalent=context.adult_equivalent,
                meals=meals,
            ))

        if not options:
            raise MealGenerationError("Meal generation failed for every group", code="API_FAILURE")

        return {
            "options": options,
            "meals": [m for o in options for m in o.meals],
            "errors": errors,
            "metadata": {
                "api_calls_made": self.api_calls,
                "generation_time_ms": int((time.monotonic() - started) * 1000),
                "source": "offline" if self.offline else self.model,
            },
        }


__all__ = [
    'MealGenerationError', 'GroupContext', 'GroupMealOptions', 'MealGenerator',
    'build_group_contexts', 'validate_plan_for_generation', 'build_prompt', 'to_meals',
]
