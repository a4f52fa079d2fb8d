import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple
from uuid import uuid4

from mealcrew.domain.SharedMealLink import SharedMealLink
from mealcrew.infra.json_store import JsonRepository
from mealcrew.infra.paths import SHARED_MEAL_LINKS_FILE
from mealcrew.utilities.clock import utcnow


class SharedMealLinkRepository(JsonRepository[SharedMealLink]):
    """One share link per plan, addressed by a 32 hex char public token."""
    filename = SHARED_MEAL_LINKS_FILE
    entity = SharedMealLink

    def get_for_plan(self, plan_id: str) -> Optional[SharedMealLink]:
        for r in self.store.load():
            if r.get('plan_id') == plan_id:
                return SharedMealLink.from_dict(r)
        return None

    def get_by_token(self, public_token: str) -> Optional[SharedMealLink]:
        for r in self.store.load():
            if r.get('public_token') == public_token:
                return SharedMealLink.from_dict(r)
        return None

    def share_plan(self, plan_id: str, user_id: str, expires_in_days: Optional[int] = None,
                   now: Optional[datetime] = None) -> Tuple[SharedMealLink, bool]:
        """Return (link, already_existed). The plan's existing link is reused as is."""
        now = now or utcnow()
        with self.store.transaction() as records:
            for r in records:
                if r.get('plan_id') == plan_id:
                    return SharedMealLink.from_dict(r), True
            taken = {r.get('public_token') for r in records}
            token = secrets.token_hex(16)
            while token in taken:
                token = secrets.token_hex(16)
            link = SharedMealLink(
                id=str(uuid4()),
                plan_id=plan_id,
                public_token=token,
                created_by=user_id,
                created_at=now,
                expires_at=now + timedelta(days=expires_in_days) if expires_in_days else None,
            )
            records.append(link.to_dict())
        return link, False

    def record_access(self, public_token: str, now: Optional[datetime] = None) -> Optional[SharedMealLink]:
        """Count one view of an unexpired link; returns the updated link or None."""
        now = now or utcnow()
        with self.store.transaction() as records:
            for r in records:
                if r.get('public_token') != public_token:
                    continue
                link = SharedMealLink.from_dict(r)
                if link.is_expired(now):
                    return None
                link.access_count += 1
                link.last_accessed_at = now
                r.update(link.to_dict())
                return link
        return None
