import logging
from datetime import timedelta
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from mealcrew.api.auth import get_current_user
from mealcrew.api.envelope import success_response, validation_message
from mealcrew.api.routes.forms import active_link_or_401, invalidate_plan_cache
from mealcrew.domain.FormResponse import FormResponse
from mealcrew.domain.Session import Session
from mealcrew.events.event_helpers import publish_response_submitted
from mealcrew.infra.Meal_Repository import MealRepository
from mealcrew.infra.Plan_Repository import PlanRepository
from mealcrew.infra.Response_Repository import ResponseRepository
from mealcrew.logic.forms.conflicts import resolution_summary
from mealcrew.utilities.clock import utcnow
from mealcrew.utilities.constants import (
    FORM_ROLES, IDEMPOTENCY_WINDOW_SECONDS, ROLE_CO_MANAGER, SUBMISSION_INSTRUCTIONS,
)
from mealcrew.utilities.network import client_ip, masked_ip, submission_key
from mealcrew.utilities.rate_limit import submission_limiter
from mealcrew.utilities.validators import FormResponseInput

router = APIRouter(prefix='/api/form-responses')
logger = logging.getLogger(__name__)


def _check_origin(request: Request):
    origin = request.headers.get('origin')
    host = request.headers.get('host')
    if origin and host and host not in origin:
        raise HTTPException(status_code=403, detail='Invalid origin')


def _response_summary(response: FormResponse) -> dict:
    return {
        'id': response.id,
        'submitted_at': response.submitted_at,
        'role': response.role,
        'selections_count': response.selections_count,
    }


@router.post('')
async def submit_response(request: Request):
    """Public submission through a form link (token or short code).

    The body is parsed here rather than by FastAPI so that the origin check and
    the rate limit apply before validation.
    """
    _check_origin(request)
    if not submission_limiter.check(submission_key(request)):
        raise HTTPException(status_code=429, detail='Too many submissions. Please try again later.')
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail='Request body must be JSON')
    try:
        payload = FormResponseInput.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_message(e.errors()))

    link = active_link_or_401(payload.token)
    plan = PlanRepository().get(link.plan_id)
    if plan is None:
        raise HTTPException(status_code=401, detail='Invalid or expired token')

    known_meals = MealRepository().index_for_plan(plan.id)
    unknown = sorted({mid for ids in payload.selections.values() for mid in ids if mid not in known_meals})
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown meal ids: {', '.join(unknown)}")

    repo = ResponseRepository()
    now = utcnow()
    if payload.idempotency_key:
        duplicate = repo.find_duplicate(link.id, payload.selections,
                                        since=now - timedelta(seconds=IDEMPOTENCY_WINDOW_SECONDS),
                                        idempotency_key=payload.idempotency_key)
        if duplicate is not None:
            return success_response({
                'response': _response_summary(duplicate),
                'message': f"Response already submitted as {link.role}",
                'duplicate': True,
            })

    response = repo.add(FormResponse(
        id=str(uuid4()),
        form_link_id=link.id,
        plan_id=plan.id,
        role=link.role,
        submitted_at=now,
        selections=payload.selections,
        comments=payload.comments,
        idempotency_key=payload.idempotency_key,
    ))
    invalidate_plan_cache(plan.id)
    publish_response_submitted(plan, response)
    logger.info("Form response %s submitted for plan %s by %s (%d meals, comments=%s, ip=%s)",
                response.id, plan.id, link.role, response.selections_count,
                bool(response.comments), masked_ip(client_ip(request)))

    return success_response({
        'response': _response_summary(response),
        'message': f"Response submitted as {link.role}",
        'instructions': SUBMISSION_INSTRUCTIONS[link.role],
        'next_steps': {
            'thank_you_url': f"/f/{payload.token}/thank-you",
            'can_resubmit': True,
            'manager_notified': link.role == ROLE_CO_MANAGER,
        },
    }, 201)


@router.get('')
def list_responses(plan_id: str = Query(..., min_length=1), user: Session = Depends(get_current_user)):
    plan = PlanRepository().get_owned(plan_id, user.user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail='Plan not found')
    stored = ResponseRepository().find(lambda r: r.plan_id == plan.id)
    newest_first = sorted(stored, key=lambda r: r.submitted_at, reverse=True)
    return success_response({
        'plan_id': plan.id,
        'responses': {role: [r.to_dict() for r in newest_first if r.role == role] for role in FORM_ROLES},
        'total': len(stored),
        'resolution_preview': resolution_summary(stored),
    })
