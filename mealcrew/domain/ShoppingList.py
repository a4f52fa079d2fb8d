"""ShoppingList aggregate: the scaled, aggregated ingredients of a finalized plan."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from mealcrew.utilities.clock import format_ts, parse_ts, utcnow


class ShoppingList:
    def __init__(self, id: str = "", plan_id: str = "", adult_equivalent: float = 0.0,
                 items: Optional[List[Dict[str, Any]]] = None, created_at: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None):
        self.id = id
        self.plan_id = plan_id
        self.adult_equivalent = adult_equivalent
        self.items = items[:] if items else []
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or self.created_at

    def get_items(self):
        return self.items

    def __str__(self) -> str:
        return f"Shopping List for plan {self.plan_id} - {len(self.items)} items (AE {self.adult_equivalent})"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return ShoppingList(
            id=d.get("id", ""),
            plan_id=d.get("plan_id", ""),
            adult_equivalent=float(d.get("adult_equivalent") or 0),
            items=d.get("items") or [],
            created_at=parse_ts(d.get("created_at")),
            updated_at=parse_ts(d.get("updated_at")),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "plan_id": self.plan_id,
            "adult_equivalent": self.adult_equivalent,
            "items": self.items,
            "created_at": format_ts(self.created_at),
            "updated_at": format_ts(self.updated_at),
        }
