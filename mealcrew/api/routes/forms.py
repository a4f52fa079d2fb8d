"""Form links: manager endpoints to issue/list/revoke and the public read model.

The public read model is cached per token for a short time; any change that
affects what a respondent sees (new response, revocation, regenerated meals,
finalization) drops the plan's cached entries. The link itself is looked up
on every request, so an expired link is refused even while its entry is cached.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from mealcrew.api.auth import get_current_user
from mealcrew.api.envelope import success_response
from mealcrew.domain.Session import Session
from mealcrew.events.event_helpers import publish_links_issued, publish_links_revoked
from mealcrew.infra.FormLink_Repository import FormLinkRepository
from mealcrew.infra.Group_Repository import GroupRepository
from mealcrew.infra.Meal_Repository import MealRepository
from mealcrew.infra.Plan_Repository import PlanRepository
from mealcrew.infra.Response_Repository import ResponseRepository
from mealcrew.logic.forms.links import remember_link, resolve_link, revoke
from mealcrew.utilities.cache import TTLCache
from mealcrew.utilities.clock import format_ts, utcnow
from mealcrew.utilities.config import PUBLIC_MEALS_CACHE_TTL
from mealcrew.utilities.constants import FORM_INSTRUCTIONS, FORM_ROLES, LINK_INSTRUCTIONS
from mealcrew.utilities.network import client_ip
from mealcrew.utilities.rate_limit import form_generation_limiter
from mealcrew.utilities.shortener import generate_public_url, increment_views
from mealcrew.utilities.validators import FormLinkRequest, parse_role

router = APIRouter(prefix='/api/forms')
logger = logging.getLogger(__name__)

public_meals_cache = TTLCache(PUBLIC_MEALS_CACHE_TTL)


def invalidate_plan_cache(plan_id: str) -> int:
    return public_meals_cache.delete_matching(lambda _key, value: value.get('plan', {}).get('id') == plan_id)


def link_payload(link, now=None) -> dict:
    now = now or utcnow()
    data = link.to_dict()
    data['url'] = generate_public_url(link.short_code)
    data['is_expired'] = link.is_expired(now)
    data['is_active'] = link.is_active(now)
    return data


def _owned_plan_or_404(plan_id: str, user: Session):
    plan = PlanRepository().get_owned(plan_id, user.user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail='Plan not found')
    return plan


# -------------------- Manager endpoints --------------------
@router.post('')
def create_form_links(request: Request, payload: FormLinkRequest, user: Session = Depends(get_current_user)):
    if not form_generation_limiter.check(f"form-gen:{client_ip(request)}"):
        raise HTTPException(status_code=429, detail='Too many requests. Please try again later.')
    plans = PlanRepository()
    plan = _owned_plan_or_404(payload.plan_id, user)

    repo = FormLinkRepository()
    now = utcnow()
    by_role, created = repo.issue_for_plan(plan.id, now)
    for link in by_role.values():
        remember_link(link)
    plans.mark_collecting(plan)

    publish_links_issued(plan, by_role.values(), len(created))
    logger.info("Form links issued for plan %s by user %s (%d new)", plan.id, user.user_id, len(created))

    links = [by_role[role] for role in FORM_ROLES]
    return success_response({
        'plan_id': plan.id,
        'links': [{
            'role': l.role,
            'url': generate_public_url(l.short_code),
            'short_code': l.short_code,
            'token': l.public_token,
            'created_at': l.created_at,
            'expires_at': l.expires_at,
        } for l in links],
        'expires_at': max(l.expires_at for l in links),
        'instructions': LINK_INSTRUCTIONS,
    }, 201)


@router.get('')
def list_form_links(plan_id: str = Query(..., min_length=1), user: Session = Depends(get_current_user)):
    plan = _owned_plan_or_404(plan_id, user)
    now = utcnow()
    links = FormLinkRepository().list_for_plan(plan.id)
    return success_response({
        'plan_id': plan.id,
        'links': [link_payload(l, now) for l in links],
        'total': len(links),
    })


@router.delete('')
def revoke_form_links(plan_id: str = Query(..., min_length=1), role: Optional[str] = Query(default=None),
                      user: Session = Depends(get_current_user)):
    try:
        role = parse_role(role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    plan = _owned_plan_or_404(plan_id, user)

    repo = FormLinkRepository()
    now = utcnow()
    revoked = revoke(repo.list_for_plan(plan.id), role=role, now=now)
    if revoked:
        repo.save_many(revoked)
    invalidate_plan_cache(plan.id)

    publish_links_revoked(plan, revoked, role)
    logger.info("Form links revoked for plan %s by user %s (role=%s, count=%d)",
                plan.id, user.user_id, role, len(revoked))
    return success_response({
        'plan_id': plan.id,
        'revoked_count': len(revoked),
        'revoked_role': role,
        'revoked_at': now,
    })


# -------------------- Public read model --------------------
def active_link_or_401(token: str):
    repo = FormLinkRepository()
    link = resolve_link(token, repo)
    if link is None or not link.is_active():
        raise HTTPException(status_code=401, detail='Invalid or expired token')
    return link


def build_public_read_model(token: str, link) -> dict:
    plan = PlanRepository().get(link.plan_id)
    if plan is None:
        raise HTTPException(status_code=401, detail='Invalid or expired token')
    meals = MealRepository().list_for_plan(plan.id)
    if not meals:
        raise HTTPException(status_code=404, detail='No meals found for this plan')
    groups = GroupRepository().get_many(plan.group_ids)
    latest = ResponseRepository().latest_for_link(link.id)

    return {
        'token': token,
        'role': link.role,
        'plan': {
            'id': plan.id,
            'name': plan.name,
            'week_start': plan.to_dict()['week_start'],
            'status': plan.status,
            'groups': [{
                'id': g.id,
                'name': g.name,
                'adults': g.adults,
                'teens': g.teens,
                'kids': g.kids,
                'toddlers': g.toddlers,
                'dietary_restrictions': g.dietary_restrictions,
            } for g in groups],
        },
        'meals': [m.to_dict() for m in meals],
        'current_selections': latest.selections if latest else {},
        'form_info': {
            'role': link.role,
            'can_override': link.can_override,
            'expires_at': format_ts(link.expires_at),
            'views_count': link.views_count,
            'instructions': FORM_INSTRUCTIONS[link.role],
        },
        'meta': {
            'total_meals': len(meals),
            'groups_represented': sorted({m.group_name for m in meals}),
            'cached': False,
        },
    }


@router.get('/{token}/meals')
def public_form_meals(token: str):
    cache_key = f"meals:{token}"
    try:
        link = active_link_or_401(token)
    except HTTPException:
        # expired links fall out of the cache as soon as they are seen
        public_meals_cache.delete(cache_key)
        raise

    cached = public_meals_cache.get(cache_key)
    if cached is not None:
        increment_views(token)
        return success_response({**cached, 'meta': {**cached['meta'], 'cached': True}})

    link.views_count = FormLinkRepository().increment_views(link.id)
    increment_views(link.short_code)

    data = build_public_read_model(token, link)
    public_meals_cache.set(cache_key, data)
    return success_response(data)


@router.head('/{token}/meals')
def public_form_check(token: str):
    repo = FormLinkRepository()
    link = resolve_link(token, repo)
    if link is None or not link.is_active():
        return Response(status_code=401)
    return Response(status_code=200, headers={
        'X-Form-Role': link.role,
        'X-Expires-At': format_ts(link.expires_at) or '',
        'Cache-Control': 'no-cache',
    })
