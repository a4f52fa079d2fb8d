"""Group domain entity: a household with demographic counts and dietary restrictions."""
from datetime import datetime
from typing import List, Optional

from mealcrew.logic.scaling.adult_equivalent import calculate_adult_equivalent
from mealcrew.utilities.clock import format_ts, parse_ts, utcnow


class Group:
    def __init__(self, id: str = "", user_id: str = "", name: str = "", adults: int = 0, teens: int = 0,
                 kids: int = 0, toddlers: int = 0, dietary_restrictions: Optional[List[str]] = None,
                 status: str = "active", created_at: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None):
        self.id = id
        self.user_id = user_id
        self.name = name
        self.adults = adults
        self.teens = teens
        self.kids = kids
        self.toddlers = toddlers
        self.dietary_restrictions = dietary_restrictions[:] if dietary_restrictions else []
        self.status = status
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or self.created_at

    @property
    def adult_equivalent(self) -> float:
        return calculate_adult_equivalent(self.adults, self.teens, self.kids, self.toddlers)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def demographics(self) -> dict:
        return {"adults": self.adults, "teens": self.teens, "kids": self.kids, "toddlers": self.toddlers}

    def __str__(self) -> str:
        return (f"{self.name} - {self.adults}A/{self.teens}T/{self.kids}K/{self.toddlers}TD"
                f" - AE {self.adult_equivalent}")

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        allowed = {"id", "user_id", "name", "adults", "teens", "kids", "toddlers",
                   "dietary_restrictions", "status"}
        filtered = {k: v for k, v in d.items() if k in allowed}
        filtered["created_at"] = parse_ts(d.get("created_at"))
        filtered["updated_at"] = parse_ts(d.get("updated_at"))
        return Group(**filtered)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "adults": self.adults,
            "teens": self.teens,
            "kids": self.kids,
            "toddlers": self.toddlers,
            "dietary_restrictions": self.dietary_restrictions,
            "status": self.status,
            "created_at": format_ts(self.created_at),
            "updated_at": format_ts(self.updated_at),
        }
