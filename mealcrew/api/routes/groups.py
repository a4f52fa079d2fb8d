import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from mealcrew.api.auth import get_current_user
from mealcrew.api.envelope import success_response
from mealcrew.domain.Session import Session
from mealcrew.infra.Group_Repository import GroupRepository
from mealcrew.utilities.validators import GroupInput

router = APIRouter(prefix='/api/groups')
logger = logging.getLogger(__name__)


def group_payload(group) -> dict:
    data = group.to_dict()
    data['adult_equivalent'] = group.adult_equivalent
    data['total_members'] = sum(group.demographics().values())
    return data


def _owned_or_404(repo: GroupRepository, group_id: str, user: Session):
    group = repo.get_owned(group_id, user.user_id)
    if group is None:
        raise HTTPException(status_code=404, detail='Group not found')
    return group


@router.get('')
def list_groups(include_inactive: bool = Query(default=False), user: Session = Depends(get_current_user)):
    groups = GroupRepository().list_for_user(user.user_id, include_inactive=include_inactive)
    return success_response({'groups': [group_payload(g) for g in groups], 'total': len(groups)})


@router.post('')
def create_group(payload: GroupInput, user: Session = Depends(get_current_user)):
    group = GroupRepository().create(user.user_id, payload.model_dump())
    logger.info("Group %s created by %s", group.id, user.user_id)
    return success_response({'group': group_payload(group)}, 201)


@router.get('/{group_id}')
def get_group(group_id: str, user: Session = Depends(get_current_user)):
    group = _owned_or_404(GroupRepository(), group_id, user)
    return success_response({'group': group_payload(group)})


@router.put('/{group_id}')
def replace_group(group_id: str, payload: GroupInput, user: Session = Depends(get_current_user)):
    repo = GroupRepository()
    group = _owned_or_404(repo, group_id, user)
    group = repo.replace(group, payload.model_dump())
    return success_response({'group': group_payload(group)})


@router.delete('/{group_id}')
def delete_group(group_id: str, user: Session = Depends(get_current_user)):
    """Soft delete: the group is marked inactive so existing plans keep their references."""
    repo = GroupRepository()
    group = _owned_or_404(repo, group_id, user)
    repo.deactivate(group)
    logger.info("Group %s deactivated by %s", group.id, user.user_id)
    return success_response({'id': group.id, 'status': group.status})
