"""Read-only share links for a plan's generated meals.

The owner mints one link per plan (reused on later requests); anyone holding
the token can read the plan's meals until the link expires.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from mealcrew.api.auth import get_current_user
from mealcrew.api.envelope import success_response
from mealcrew.domain.Session import Session
from mealcrew.infra.Meal_Repository import MealRepository
from mealcrew.infra.Plan_Repository import PlanRepository
from mealcrew.infra.SharedMealLink_Repository import SharedMealLinkRepository
from mealcrew.utilities.clock import format_ts, utcnow
from mealcrew.utilities.config import APP_BASE_URL
from mealcrew.utilities.validators import SharedMealsRequest

router = APIRouter(prefix='/api/shared-meals')
logger = logging.getLogger(__name__)


def share_url(token: str) -> str:
    return f"{APP_BASE_URL}/shared-meals/{token}"


def _share_payload(link, **extra) -> dict:
    return {
        'share_url': share_url(link.public_token),
        'token': link.public_token,
        'plan_id': link.plan_id,
        'created_at': format_ts(link.created_at),
        'expires_at': format_ts(link.expires_at),
        'access_count': link.access_count,
        'last_accessed_at': format_ts(link.last_accessed_at),
        **extra,
    }


@router.post('')
def create_share_link(payload: SharedMealsRequest, user: Session = Depends(get_current_user)):
    plan = PlanRepository().get(payload.plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail='Plan not found')
    if plan.user_id != user.user_id:
        raise HTTPException(status_code=403, detail='You can only share your own meal plans')
    meals = MealRepository().list_for_plan(plan.id)
    if not meals:
        raise HTTPException(status_code=400, detail='Can only share plans with generated meals')

    link, existing = SharedMealLinkRepository().share_plan(plan.id, user.user_id, payload.expires_in_days)
    if existing:
        return success_response(_share_payload(link, is_existing=True))

    logger.info("Share link created for plan %s by user %s (expires %s)",
                plan.id, user.user_id, format_ts(link.expires_at) or 'never')
    return success_response(_share_payload(link, is_existing=False, plan_name=plan.name,
                                           total_meals=len(meals)), 201)


def shared_meals_read_model(token: Optional[str]) -> dict:
    """Resolve a share token to the plan's meals and count the view.

    Raises HTTPException: 400 without a token, 404 for unknown tokens or
    deleted plans, 403 once the link has expired.
    """
    if not token:
        raise HTTPException(status_code=400, detail='Share token is required')
    repo = SharedMealLinkRepository()
    link = repo.get_by_token(token)
    if link is None:
        raise HTTPException(status_code=404, detail='Invalid or expired share link')
    now = utcnow()
    if link.is_expired(now):
        raise HTTPException(status_code=403, detail='Share link has expired')
    plan = PlanRepository().get(link.plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail='Meal plan not found')

    meals = MealRepository().list_for_plan(plan.id)
    meals.sort(key=lambda m: (m.group_name.lower(), m.created_at))
    link = repo.record_access(token, now) or link

    return {
        'plan': {
            'id': plan.id,
            'name': plan.name,
            'week_start': plan.to_dict()['week_start'],
            'total_meals': len(meals),
            'created_at': format_ts(plan.created_at),
        },
        'meals': [m.to_dict() for m in meals],
        'share_info': {
            'created_at': format_ts(link.created_at),
            'access_count': link.access_count,
            'expires_at': format_ts(link.expires_at),
        },
        'total_meals': len(meals),
    }


@router.get('')
def get_shared_meals(token: Optional[str] = Query(default=None)):
    return success_response(shared_meals_read_model(token))
