from typing import Dict, List

from mealcrew.domain.Meal import Meal
from mealcrew.infra.json_store import JsonRepository
from mealcrew.infra.paths import MEALS_FILE


class MealRepository(JsonRepository[Meal]):
    filename = MEALS_FILE
    entity = Meal

    def list_for_plan(self, plan_id: str) -> List[Meal]:
        meals = self.find(lambda m: m.plan_id == plan_id)
        meals.sort(key=lambda m: (m.group_name.lower(), m.title.lower()))
        return meals

    def index_for_plan(self, plan_id: str) -> Dict[str, Meal]:
        return {m.id: m for m in self.list_for_plan(plan_id)}

    def replace_for_plan(self, plan_id: str, meals: List[Meal]) -> List[Meal]:
        """Drop the plan's previous meals and store the new batch in one write."""
        with self.store.transaction() as records:
            records[:] = [r for r in records if r.get('plan_id') != plan_id]
            records.extend(m.to_dict() for m in meals)
        return meals
