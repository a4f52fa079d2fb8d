"""SharedMealLink domain entity: a read-only public token for a plan's generated meals."""
from datetime import datetime
from typing import Optional

from mealcrew.utilities.clock import format_ts, parse_ts, utcnow


class SharedMealLink:
    def __init__(self, id: str = "", plan_id: str = "", public_token: str = "", created_by: str = "",
                 created_at: Optional[datetime] = None, expires_at: Optional[datetime] = None,
                 access_count: int = 0, last_accessed_at: Optional[datetime] = None):
        self.id = id
        self.plan_id = plan_id
        self.public_token = public_token
        self.created_by = created_by
        self.created_at = created_at or utcnow()
        # None never expires
        self.expires_at = expires_at
        self.access_count = access_count
        self.last_accessed_at = last_accessed_at

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at

    def __str__(self) -> str:
        return f"shared meals of plan {self.plan_id} - {self.access_count} views"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return SharedMealLink(
            id=d.get("id", ""),
            plan_id=d.get("plan_id", ""),
            public_token=d.get("public_token", ""),
            created_by=d.get("created_by", ""),
            created_at=parse_ts(d.get("created_at")),
            expires_at=parse_ts(d.get("expires_at")),
            access_count=int(d.get("access_count") or 0),
            last_accessed_at=parse_ts(d.get("last_accessed_at")),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "plan_id": self.plan_id,
            "public_token": self.public_token,
            "created_by": self.created_by,
            "created_at": format_ts(self.created_at),
            "expires_at": format_ts(self.expires_at),
            "access_count": self.access_count,
            "last_accessed_at": format_ts(self.last_accessed_at),
        }
