"""Plan domain entity: a week of meals for one or more groups, moving draft -> collecting -> finalized."""
from datetime import date, datetime
from typing import Dict, List, Optional

from mealcrew.utilities.clock import format_ts, parse_ts, utcnow
from mealcrew.utilities.constants import DATE_FORMAT, PLAN_DRAFT, PLAN_FINALIZED


class Plan:
    def __init__(self, id: str = "", user_id: str = "", name: str = "", week_start: Optional[date] = None,
                 group_ids: Optional[List[str]] = None, notes: str = "", status: str = PLAN_DRAFT,
                 selections: Optional[Dict[str, List[str]]] = None, finalized_at: Optional[datetime] = None,
                 created_at: Optional[datetime] = None, updated_at: Optional[datetime] = None):
        self.id = id
        self.user_id = user_id
        self.name = name
        self.week_start = week_start
        self.group_ids = group_ids[:] if group_ids else []
        self.notes = notes or ""
        self.status = status
        # final day -> meal ids, written on finalization
        self.selections = {d: list(ids) for d, ids in (selections or {}).items()}
        self.finalized_at = finalized_at
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or self.created_at

    @property
    def is_finalized(self) -> bool:
        return self.status == PLAN_FINALIZED

    def touch(self):
        self.updated_at = utcnow()

    def __str__(self) -> str:
        return f"{self.name} ({self.week_start}) - {self.status} - groups: {', '.join(self.group_ids)}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        week_start = d.get("week_start")
        if isinstance(week_start, str) and week_start:
            week_start = datetime.strptime(week_start[:10], DATE_FORMAT).date()
        return Plan(
            id=d.get("id", ""),
            user_id=d.get("user_id", ""),
            name=d.get("name", ""),
            week_start=week_start or None,
            group_ids=d.get("group_ids") or [],
            notes=d.get("notes") or "",
            status=d.get("status", PLAN_DRAFT),
            selections=d.get("selections") or {},
            finalized_at=parse_ts(d.get("finalized_at")),
            created_at=parse_ts(d.get("created_at")),
            updated_at=parse_ts(d.get("updated_at")),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "week_start": self.week_start.strftime(DATE_FORMAT) if self.week_start else None,
            "group_ids": self.group_ids,
            "notes": self.notes,
            "status": self.status,
            "selections": self.selections,
            "finalized_at": format_ts(self.finalized_at),
            "created_at": format_ts(self.created_at),
            "updated_at": format_ts(self.updated_at),
        }
