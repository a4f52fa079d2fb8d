"""FormLink domain entity: a public, role-bound token granting access to a plan's selection form."""
from datetime import datetime
from typing import Optional

from mealcrew.utilities.clock import format_ts, parse_ts, utcnow
from mealcrew.utilities.constants import ROLE_CO_MANAGER


class FormLink:
    def __init__(self, id: str = "", plan_id: str = "", public_token: str = "", short_code: str = "",
                 role: str = "other", created_at: Optional[datetime] = None,
                 expires_at: Optional[datetime] = None, revoked_at: Optional[datetime] = None,
                 views_count: int = 0, token_version: int = 1):
        self.id = id
        self.plan_id = plan_id
        self.public_token = public_token
        self.short_code = short_code
        self.role = role
        self.created_at = created_at or utcnow()
        self.expires_at = expires_at
        self.revoked_at = revoked_at
        self.views_count = views_count
        self.token_version = token_version

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        '''Expired from the expires_at instant onwards; links without expiry never expire.'''
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at

    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return not self.is_revoked() and not self.is_expired(now)

    @property
    def can_override(self) -> bool:
        return self.role == ROLE_CO_MANAGER

    def __str__(self) -> str:
        state = "revoked" if self.is_revoked() else ("expired" if self.is_expired() else "active")
        return f"{self.role} link {self.short_code} for plan {self.plan_id} - {state}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return FormLink(
            id=d.get("id", ""),
            plan_id=d.get("plan_id", ""),
            public_token=d.get("public_token", ""),
            short_code=d.get("short_code", ""),
            role=d.get("role", "other"),
            created_at=parse_ts(d.get("created_at")),
            expires_at=parse_ts(d.get("expires_at")),
            revoked_at=parse_ts(d.get("revoked_at")),
            views_count=int(d.get("views_count") or 0),
            token_version=int(d.get("token_version") or 1),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "plan_id": self.plan_id,
            "public_token": self.public_token,
            "short_code": self.short_code,
            "role": self.role,
            "created_at": format_ts(self.created_at),
            "expires_at": format_ts(self.expires_at),
            "revoked_at": format_ts(self.revoked_at),
            "views_count": self.views_count,
            "token_version": self.token_version,
        }
