"""Ingredient value object: name, amount, unit, category, optional notes."""
from typing import Optional


class Ingredient:
    def __init__(self, name: str = "", amount: float = 0, unit: str = "", category: str = "other",
                 notes: Optional[str] = None):
        self.name = name
        self.amount = amount
        self.unit = unit
        self.category = category
        self.notes = notes

    def __str__(self) -> str:
        return f"{self.name} - {self.amount} {self.unit} ({self.category})"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates an Ingredient from a dict. A bare string counts as one serving of that item.'''
        if isinstance(data, str):
            return Ingredient(name=data.strip(), amount=1, unit="serving", category="other")
        d = dict(data) if isinstance(data, dict) else {}
        try:
            amount = float(d.get("amount") or 0)
        except (TypeError, ValueError):
            amount = 0
        return Ingredient(
            name=str(d.get("name") or "").strip(),
            amount=amount,
            unit=str(d.get("unit") or "").strip(),
            category=str(d.get("category") or "other").strip().lower(),
            notes=d.get("notes"),
        )

    def to_dict(self):
        out = {"name": self.name, "amount": self.amount, "unit": self.unit, "category": self.category}
        if self.notes:
            out["notes"] = self.notes
        return out
