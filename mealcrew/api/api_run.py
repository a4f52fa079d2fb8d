from fastapi import FastAPI, Request, Query
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
import logging

from mealcrew.api.auth import auth_middleware, session_from_request, router as auth_router
from mealcrew.api.envelope import error_response, validation_message
from mealcrew.api.routes import forms, groups, notifications, plans, responses, shared_meals, shopping_lists
from mealcrew.api.routes.groups import group_payload
from mealcrew.events.notifications import start as start_notifications
from mealcrew.infra.FormLink_Repository import FormLinkRepository
from mealcrew.infra.Group_Repository import GroupRepository
from mealcrew.infra.Meal_Repository import MealRepository
from mealcrew.infra.Plan_Repository import PlanRepository
from mealcrew.logic.forms.links import resolve_link
from mealcrew.utilities.config import STATIC_DIR, TEMPLATES_DIR
from mealcrew.utilities.constants import DAYS, FORM_INSTRUCTIONS, FORM_ROLES

# Logging
logger = logging.getLogger("mealcrew_app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Register event bus subscribers for manager notifications when the app starts."""
    start_notifications()
    logger.info("Notification observers started")
    yield


# Initialize FastAPI app
app = FastAPI(title="MealCrew - Group Meal Planning API", lifespan=lifespan)
app.middleware("http")(auth_middleware)

# Include routers
app.include_router(auth_router)
app.include_router(groups.router)
app.include_router(plans.router)
app.include_router(forms.router)
app.include_router(responses.router)
app.include_router(shopping_lists.router)
app.include_router(notifications.router)
app.include_router(shared_meals.router)

# Static files
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Templates
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


# -------------------- Error envelope --------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(message, exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(validation_message(exc.errors()), 400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response("Internal server error", 500)


def safe_redirect_target(value: Optional[str]) -> str:
    """Only same-site paths. A second slash or backslash would make the browser treat it as a host."""
    if not value or not value.startswith("/") or value[1:2] in ("/", "\\"):
        return "/dashboard"
    return value


def _ts() -> int:
    """Cache-busting timestamp for static assets."""
    return int(datetime.now().timestamp())


# -------------------- UI PAGES --------------------
@app.get("/", response_class=HTMLResponse)
def main_page(request: Request, redirectTo: Optional[str] = Query(default=None)):
    session = session_from_request(request)
    if session is not None and not redirectTo:
        return RedirectResponse(url="/dashboard", status_code=303)
    return templates.TemplateResponse(request, "index.html", {
        "redirect_to": safe_redirect_target(redirectTo),
        "time": _ts(),
    })


@app.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request):
    user = request.state.user
    user_groups = GroupRepository().list_for_user(user.user_id)
    user_plans = PlanRepository().list_for_user(user.user_id)
    links_repo = FormLinkRepository()
    group_names = {g.id: g.name for g in GroupRepository().list_for_user(user.user_id, include_inactive=True)}

    plan_rows = []
    for plan in user_plans:
        links = links_repo.list_for_plan(plan.id)
        active = {l.role for l in links if l.is_active()}
        plan_rows.append({
            "plan": plan,
            "group_names": [group_names.get(gid, "?") for gid in plan.group_ids],
            "links_state": {role: role in active for role in FORM_ROLES},
            "meal_count": len(MealRepository().list_for_plan(plan.id)),
        })

    return templates.TemplateResponse(request, "dashboard.html", {
        "user": user,
        "groups": [group_payload(g) for g in user_groups],
        "plans": plan_rows,
        "time": _ts(),
    })


def _form_page_context(token: str):
    link = resolve_link(token, FormLinkRepository())
    if link is None or not link.is_active():
        return None, None
    return link, PlanRepository().get(link.plan_id)


@app.get("/f/{code}", response_class=HTMLResponse)
def public_form_page(request: Request, code: str):
    link, plan = _form_page_context(code)
    if link is None or plan is None:
        return templates.TemplateResponse(request, "form_error.html", {
            "message": "This link is invalid, expired or has been revoked.",
            "time": _ts(),
        }, status_code=401)
    return templates.TemplateResponse(request, "form.html", {
        "token": code,
        "plan": plan,
        "role": link.role,
        "instructions": FORM_INSTRUCTIONS[link.role],
        "days": DAYS,
        "time": _ts(),
    })


@app.get("/f/{code}/thank-you", response_class=HTMLResponse)
def public_thank_you_page(request: Request, code: str):
    link, plan = _form_page_context(code)
    return templates.TemplateResponse(request, "thank_you.html", {
        "token": code,
        "plan": plan,
        "role": link.role if link else None,
        "time": _ts(),
    })


@app.get("/shared-meals/{token}", response_class=HTMLResponse)
def shared_meals_page(request: Request, token: str):
    try:
        data = shared_meals.shared_meals_read_model(token)
    except StarletteHTTPException as e:
        return templates.TemplateResponse(request, "form_error.html", {
            "message": e.detail,
            "time": _ts(),
        }, status_code=e.status_code)
    by_group = {}
    for meal in data["meals"]:
        by_group.setdefault(meal["group_name"] or "Meals", []).append(meal)
    return templates.TemplateResponse(request, "shared_meals.html", {
        **data,
        "meals_by_group": by_group,
        "time": _ts(),
    })
