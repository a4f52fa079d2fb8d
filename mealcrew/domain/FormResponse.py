"""FormResponse domain entity: one submission through a form link (role snapshot + selections)."""
from datetime import datetime
from typing import Dict, List, Optional

from mealcrew.utilities.clock import format_ts, parse_ts, utcnow


class FormResponse:
    def __init__(self, id: str = "", form_link_id: str = "", plan_id: str = "", role: str = "other",
                 submitted_at: Optional[datetime] = None, selections: Optional[Dict[str, List[str]]] = None,
                 comments: Optional[str] = None, idempotency_key: Optional[str] = None):
        self.id = id
        self.form_link_id = form_link_id
        self.plan_id = plan_id
        self.role = role
        self.submitted_at = submitted_at or utcnow()
        self.selections = {d: list(ids) for d, ids in (selections or {}).items()}
        self.comments = comments
        self.idempotency_key = idempotency_key

    @property
    def selections_count(self) -> int:
        return sum(len(ids) for ids in self.selections.values())

    def __str__(self) -> str:
        return f"{self.role} response {self.id} at {format_ts(self.submitted_at)} - {self.selections_count} meals"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return FormResponse(
            id=d.get("id", ""),
            form_link_id=d.get("form_link_id", ""),
            plan_id=d.get("plan_id", ""),
            role=d.get("role") or d.get("form_link_role") or "other",
            submitted_at=parse_ts(d.get("submitted_at")),
            selections=d.get("selections") or {},
            comments=d.get("comments"),
            idempotency_key=d.get("idempotency_key"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "form_link_id": self.form_link_id,
            "plan_id": self.plan_id,
            "role": self.role,
            "submitted_at": format_ts(self.submitted_at),
            "selections": self.selections,
            "comments": self.comments,
            "idempotency_key": self.idempotency_key,
        }
