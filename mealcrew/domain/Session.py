"""Session domain entity: a logged-in manager identified by the session cookie."""
from datetime import datetime
from typing import Optional

from mealcrew.utilities.clock import format_ts, parse_ts, utcnow


class Session:
    def __init__(self, id: str = "", user_id: str = "", email: str = "",
                 created_at: Optional[datetime] = None, expires_at: Optional[datetime] = None):
        self.id = id
        self.user_id = user_id
        self.email = email
        self.created_at = created_at or utcnow()
        self.expires_at = expires_at

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at is None or (now or utcnow()) < self.expires_at

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return Session(
            id=d.get("id", ""),
            user_id=d.get("user_id", ""),
            email=d.get("email", ""),
            created_at=parse_ts(d.get("created_at")),
            expires_at=parse_ts(d.get("expires_at")),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "email": self.email,
            "created_at": format_ts(self.created_at),
            "expires_at": format_ts(self.expires_at),
        }
