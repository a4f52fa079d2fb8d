from typing import List, Optional
from uuid import uuid4

from mealcrew.domain.Group import Group
from mealcrew.infra.json_store import JsonRepository
from mealcrew.infra.paths import GROUPS_FILE
from mealcrew.utilities.clock import utcnow


class GroupRepository(JsonRepository[Group]):
    filename = GROUPS_FILE
    entity = Group

    def create(self, user_id: str, data: dict) -> Group:
        group = Group(id=str(uuid4()), user_id=user_id, status="active", **data)
        return self.add(group)

    def list_for_user(self, user_id: str, include_inactive: bool = False) -> List[Group]:
        groups = self.find(lambda g: g.user_id == user_id and (include_inactive or g.is_active))
        groups.sort(key=lambda g: g.created_at, reverse=True)
        return groups

    def get_owned(self, group_id: str, user_id: str) -> Optional[Group]:
        group = self.get(group_id)
        if group is None or group.user_id != user_id:
            return None
        return group

    def get_many(self, group_ids: List[str]) -> List[Group]:
        """Groups in the order of group_ids; unknown ids are skipped."""
        index = {g.id: g for g in self.all()}
        return [index[i] for i in group_ids if i in index]

    def replace(self, group: Group, data: dict) -> Group:
        for key, value in data.items():
            setattr(group, key, value)
        group.updated_at = utcnow()
        return self.update(group)

    def deactivate(self, group: Group) -> Group:
        group.status = "inactive"
        group.updated_at = utcnow()
        return self.update(group)
