import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from mealcrew.api.auth import get_current_user
from mealcrew.api.envelope import success_response
from mealcrew.api.routes.forms import invalidate_plan_cache, link_payload
from mealcrew.api.routes.groups import group_payload
from mealcrew.domain.Session import Session
from mealcrew.events.event_helpers import publish_meals_generated, publish_plan_finalized
from mealcrew.infra.FormLink_Repository import FormLinkRepository
from mealcrew.infra.Group_Repository import GroupRepository
from mealcrew.infra.Meal_Repository import MealRepository
from mealcrew.infra.Plan_Repository import PlanRepository
from mealcrew.infra.Response_Repository import ResponseRepository
from mealcrew.infra.SharedMealLink_Repository import SharedMealLinkRepository
from mealcrew.infra.ShoppingList_Repository import ShoppingListRepository
from mealcrew.logic.forms.conflicts import resolve_selections, selections_to_plan_meals
from mealcrew.logic.generation.meal_generator import (
    MealGenerationError, MealGenerator, build_group_contexts, validate_plan_for_generation,
)
from mealcrew.logic.scaling.adult_equivalent import plan_adult_equivalent
from mealcrew.logic.shopping.list_builder import build_shopping_list
from mealcrew.utilities.constants import ROLE_CO_MANAGER, ROLE_OTHER
from mealcrew.utilities.validators import GenerateMealsInput, PlanInput, PlanUpdateInput

router = APIRouter(prefix='/api/plans')
logger = logging.getLogger(__name__)


def get_meal_generator() -> MealGenerator:
    return MealGenerator()


def _owned_plan_or_404(plan_id: str, user: Session):
    plan = PlanRepository().get_owned(plan_id, user.user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail='Plan not found')
    return plan


def _owned_groups_or_400(group_ids, user: Session):
    groups = GroupRepository().get_many(group_ids)
    owned = [g for g in groups if g.user_id == user.user_id and g.is_active]
    missing = [gid for gid in group_ids if gid not in {g.id for g in owned}]
    if missing:
        raise HTTPException(status_code=400, detail=f"Unknown groups: {', '.join(missing)}")
    return owned


def plan_payload(plan, groups=None, links=None) -> dict:
    data = plan.to_dict()
    if groups is not None:
        data['groups'] = [group_payload(g) for g in groups]
        data['adult_equivalent'] = plan_adult_equivalent(groups)
    if links is not None:
        data['links'] = [link_payload(l) for l in links]
    return data


@router.get('')
def list_plans(user: Session = Depends(get_current_user)):
    plans = PlanRepository().list_for_user(user.user_id)
    return success_response({'plans': [plan_payload(p) for p in plans], 'total': len(plans)})


@router.post('')
def create_plan(payload: PlanInput, user: Session = Depends(get_current_user)):
    groups = _owned_groups_or_400(payload.group_ids, user)
    plan = PlanRepository().create(user.user_id, payload.name, payload.week_start, payload.group_ids, payload.notes)
    logger.info("Plan %s created by %s", plan.id, user.user_id)
    return success_response({'plan': plan_payload(plan, groups)}, 201)


@router.get('/{plan_id}')
def get_plan(plan_id: str, user: Session = Depends(get_current_user)):
    plan = _owned_plan_or_404(plan_id, user)
    groups = GroupRepository().get_many(plan.group_ids)
    links = FormLinkRepository().list_for_plan(plan.id)
    return success_response({'plan': plan_payload(plan, groups, links)})


@router.patch('/{plan_id}')
def update_plan(plan_id: str, payload: PlanUpdateInput, user: Session = Depends(get_current_user)):
    plan = _owned_plan_or_404(plan_id, user)
    if plan.is_finalized:
        raise HTTPException(status_code=400, detail='Finalized plans cannot be edited')
    changes = payload.model_dump(exclude_unset=True)
    if changes.get('group_ids') is not None:
        _owned_groups_or_400(changes['group_ids'], user)
    for key, value in changes.items():
        if key == "notes":
            plan.notes = value or ""
        elif value is not None:
            setattr(plan, key, value)
    plan.touch()
    PlanRepository().update(plan)
    invalidate_plan_cache(plan.id)
    return success_response({'plan': plan_payload(plan, GroupRepository().get_many(plan.group_ids))})


@router.delete('/{plan_id}')
def delete_plan(plan_id: str, user: Session = Depends(get_current_user)):
    """Delete the plan together with its meals, links, responses, shopping list and share link."""
    plan = _owned_plan_or_404(plan_id, user)

    def same_plan(record):
        return record.get("plan_id") == plan.id

    MealRepository().delete_where(same_plan)
    FormLinkRepository().delete_where(same_plan)
    ResponseRepository().delete_where(same_plan)
    ShoppingListRepository().delete_where(same_plan)
    SharedMealLinkRepository().delete_where(same_plan)
    PlanRepository().delete(plan.id)
    invalidate_plan_cache(plan.id)
    logger.info("Plan %s deleted by %s", plan.id, user.user_id)
    return success_response({'id': plan.id, 'deleted': True})


# -------------------- Meal generation --------------------
@router.post('/{plan_id}/generate-meals')
def generate_meals(plan_id: str, payload: Optional[GenerateMealsInput] = Body(default=None),
                   user: Session = Depends(get_current_user),
                   generator: MealGenerator = Depends(get_meal_generator)):
    plan = _owned_plan_or_404(plan_id, user)
    if plan.is_finalized:
        raise HTTPException(status_code=400, detail='Plan is already finalized')
    payload = payload or GenerateMealsInput()
    groups = [g for g in GroupRepository().get_many(plan.group_ids) if g.user_id == user.user_id]

    problems = validate_plan_for_generation(plan, groups, payload.group_meals)
    if problems:
        raise HTTPException(status_code=400, detail='; '.join(problems))
    contexts = build_group_contexts(groups, payload.group_meals)

    try:
        result = generator.generate_for_plan(plan, contexts, payload.additional_notes)
    except MealGenerationError as e:
        logger.warning("Meal generation failed for plan %s: %s", plan.id, e)
        raise HTTPException(status_code=500, detail=f"Meal generation failed: {e}")

    MealRepository().replace_for_plan(plan.id, result['meals'])
    invalidate_plan_cache(plan.id)
    publish_meals_generated(plan, len(result['meals']), result['errors'])
    logger.info("Generated %d meals for plan %s", len(result['meals']), plan.id)

    return success_response({
        'plan_id': plan.id,
        'total_meals_generated': len(result['meals']),
        'group_meal_options': [o.to_dict() for o in result['options']],
        'generation_metadata': result['metadata'],
        'errors': result['errors'],
    }, 201)


@router.get('/{plan_id}/meals')
def list_meals(plan_id: str, user: Session = Depends(get_current_user)):
    plan = _owned_plan_or_404(plan_id, user)
    meals = MealRepository().list_for_plan(plan.id)
    return success_response({'plan_id': plan.id, 'meals': [m.to_dict() for m in meals], 'total': len(meals)})


# -------------------- Finalization --------------------
@router.post('/{plan_id}/finalize')
def finalize_plan(plan_id: str, user: Session = Depends(get_current_user)):
    plan = _owned_plan_or_404(plan_id, user)

    # storage order, so equal timestamps resolve to the later-stored response
    responses = ResponseRepository().find(lambda r: r.plan_id == plan.id)
    selections = resolve_selections(responses)
    plan_meals = selections_to_plan_meals(plan.id, selections)

    groups = GroupRepository().get_many(plan.group_ids)
    adult_equivalent = plan_adult_equivalent(groups)
    items = build_shopping_list(plan_meals, MealRepository().index_for_plan(plan.id), adult_equivalent)

    plan = PlanRepository().finalize(plan, selections)
    ShoppingListRepository().upsert(plan.id, items, adult_equivalent)
    invalidate_plan_cache(plan.id)
    publish_plan_finalized(plan, len(selections), len(items))
    logger.info("Plan %s finalized by %s (%d days, %d items)", plan.id, user.user_id, len(selections), len(items))

    return success_response({
        'message': 'Plan finalized successfully',
        'plan_id': plan.id,
        'selections_applied': len(selections),
        'co_manager_responses': sum(1 for r in responses if r.role == ROLE_CO_MANAGER),
        'other_responses': sum(1 for r in responses if r.role == ROLE_OTHER),
        'plan_meals': plan_meals,
        'shopping_list_items': len(items),
    })
