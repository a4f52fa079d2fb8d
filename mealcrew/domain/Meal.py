"""Meal domain entity: one generated meal option offered on a plan's public forms."""
from datetime import datetime
from typing import List, Optional

from mealcrew.domain.Ingredient import Ingredient
from mealcrew.utilities.clock import format_ts, parse_ts, utcnow


class Meal:
    def __init__(self, id: str = "", plan_id: str = "", group_id: str = "", group_name: str = "",
                 title: str = "", description: str = "", prep_time: int = 0, cook_time: int = 0,
                 servings: int = 1, ingredients: Optional[List[Ingredient]] = None,
                 instructions: Optional[List[str]] = None, tags: Optional[List[str]] = None,
                 dietary_info: Optional[List[str]] = None, difficulty: str = "easy",
                 created_at: Optional[datetime] = None):
        self.id = id
        self.plan_id = plan_id
        self.group_id = group_id
        self.group_name = group_name
        self.title = title
        self.description = description
        self.prep_time = prep_time
        self.cook_time = cook_time
        self.servings = servings
        self.ingredients = ingredients[:] if ingredients else []
        self.instructions = instructions[:] if instructions else []
        self.tags = tags[:] if tags else []
        self.dietary_info = dietary_info[:] if dietary_info else []
        self.difficulty = difficulty
        self.created_at = created_at or utcnow()

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time

    def __str__(self) -> str:
        return f"{self.title} - {self.servings} servings - {self.total_time} min - {self.group_name}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return Meal(
            id=d.get("id", ""),
            plan_id=d.get("plan_id", ""),
            group_id=d.get("group_id", ""),
            group_name=d.get("group_name", ""),
            title=d.get("title", ""),
            description=d.get("description", ""),
            prep_time=int(d.get("prep_time") or 0),
            cook_time=int(d.get("cook_time") or 0),
            servings=int(d.get("servings") or 1),
            ingredients=[Ingredient.from_dict(i) for i in d.get("ingredients", [])],
            instructions=d.get("instructions") or d.get("steps") or [],
            tags=d.get("tags") or [],
            dietary_info=d.get("dietary_info") or [],
            difficulty=d.get("difficulty", "easy"),
            created_at=parse_ts(d.get("created_at")),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "plan_id": self.plan_id,
            "group_id": self.group_id,
            "group_name": self.group_name,
            "title": self.title,
            "description": self.description,
            "prep_time": self.prep_time,
            "cook_time": self.cook_time,
            "total_time": self.total_time,
            "servings": self.servings,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "instructions": self.instructions,
            "tags": self.tags,
            "dietary_info": self.dietary_info,
            "difficulty": self.difficulty,
            "created_at": format_ts(self.created_at),
        }
