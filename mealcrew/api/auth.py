"""Cookie sessions for managers.

A manager logs in with an e-mail address; the session id is stored in an
http-only cookie. The middleware gates /api and /dashboard, public form
endpoints excepted; route handlers get the session via `get_current_user`.
"""
import logging
import re
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from mealcrew.api.envelope import error_response, success_response
from mealcrew.domain.Session import Session
from mealcrew.infra.Session_Repository import SessionRepository
from mealcrew.utilities.config import COOKIE_SECURE, SESSION_COOKIE_NAME, SESSION_TTL_DAYS
from mealcrew.utilities.validators import LoginInput

logger = logging.getLogger(__name__)

router = APIRouter()

PUBLIC_PREFIXES = ('/auth/', '/f/', '/static/')
PUBLIC_EXACT = {'/', '/docs', '/redoc', '/openapi.json', '/favicon.ico', '/auth/login'}
_PUBLIC_MEALS_RE = re.compile(r'^/api/forms/[^/]+/meals/?$')


def is_public_path(method: str, path: str) -> bool:
    if path in PUBLIC_EXACT or path.startswith(PUBLIC_PREFIXES):
        return True
    if method in ('GET', 'HEAD') and _PUBLIC_MEALS_RE.match(path):
        return True
    if method == 'GET' and path.rstrip('/') == '/api/shared-meals':
        return True
    if method == 'POST' and path.rstrip('/') in ('/api/form-responses', '/api/auth/clear'):
        return True
    return False


def session_from_request(request: Request):
    return SessionRepository().resolve(request.cookies.get(SESSION_COOKIE_NAME))


async def auth_middleware(request: Request, call_next):
    path = request.url.path
    gated = path.startswith('/api') or path.startswith('/dashboard')
    if not gated or is_public_path(request.method, path):
        return await call_next(request)

    session = session_from_request(request)
    if session is None:
        if path.startswith('/api'):
            return error_response('Authentication required', 401)
        return RedirectResponse(url=f"/?redirectTo={quote(path)}", status_code=303)
    request.state.user = session
    return await call_next(request)


def get_current_user(request: Request) -> Session:
    session = getattr(request.state, 'user', None) or session_from_request(request)
    if session is None:
        raise HTTPException(status_code=401, detail='Authentication required')
    return session


def _set_session_cookie(response, session: Session):
    response.set_cookie(
        SESSION_COOKIE_NAME, session.id,
        max_age=SESSION_TTL_DAYS * 24 * 3600, httponly=True, samesite='lax', secure=COOKIE_SECURE,
    )


@router.post('/auth/login')
def login(payload: LoginInput):
    session = SessionRepository().open(payload.email)
    logger.info("User %s logged in", session.user_id)
    response = success_response({'user': {'id': session.user_id, 'email': session.email}})
    _set_session_cookie(response, session)
    return response


@router.post('/api/auth/signout')
def signout(user: Session = Depends(get_current_user)):
    SessionRepository().close(user.id)
    logger.info("User %s signed out", user.user_id)
    response = success_response({'message': 'Signed out successfully'})
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


@router.post('/api/auth/clear')
def clear_session(request: Request):
    """Drop the session cookie (and the session, if it still exists)."""
    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    if session_id:
        SessionRepository().close(session_id)
    response = success_response({'message': 'Session cleared'})
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


@router.get('/api/auth/me')
def me(user: Session = Depends(get_current_user)):
    return success_response({'user': {'id': user.user_id, 'email': user.email},
                             'expires_at': user.expires_at})
