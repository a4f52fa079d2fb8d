from typing import Optional

from fastapi import APIRouter, Depends, Query

from mealcrew.api.auth import get_current_user
from mealcrew.api.envelope import success_response
from mealcrew.domain.Session import Session
from mealcrew.events.notifications import get_notifications, mark_read
from mealcrew.utilities.validators import NotificationsReadInput

router = APIRouter(prefix='/api/notifications')


@router.get('')
def list_notifications(since: Optional[int] = Query(default=None, ge=0),
                       limit: int = Query(default=50, ge=1, le=200),
                       unread_only: bool = Query(default=False),
                       user: Session = Depends(get_current_user)):
    """Poll with since=<next_cursor> to receive only newer notifications."""
    return success_response(get_notifications(user.user_id, since=since, limit=limit, unread_only=unread_only))


@router.patch('')
def read_notifications(payload: NotificationsReadInput, user: Session = Depends(get_current_user)):
    updated = mark_read(user.user_id, payload.ids, mark_all=payload.all)
    return success_response({'updated': updated})
