from typing import Optional
from uuid import uuid4

from mealcrew.domain.ShoppingList import ShoppingList
from mealcrew.infra.json_store import JsonRepository
from mealcrew.infra.paths import SHOPPING_LISTS_FILE
from mealcrew.utilities.clock import utcnow


class ShoppingListRepository(JsonRepository[ShoppingList]):
    filename = SHOPPING_LISTS_FILE
    entity = ShoppingList

    def get_for_plan(self, plan_id: str) -> Optional[ShoppingList]:
        for r in self.store.load():
            if r.get('plan_id') == plan_id:
                return ShoppingList.from_dict(r)
        return None

    def upsert(self, plan_id: str, items: list, adult_equivalent: float) -> ShoppingList:
        """One list per plan: replace the items of an existing list, else create one."""
        with self.store.transaction() as records:
            for idx, r in enumerate(records):
                if r.get('plan_id') == plan_id:
                    current = ShoppingList.from_dict(r)
                    current.items = items
                    current.adult_equivalent = adult_equivalent
                    current.updated_at = utcnow()
                    records[idx] = current.to_dict()
                    return current
            created = ShoppingList(id=str(uuid4()), plan_id=plan_id, items=items,
                                   adult_equivalent=adult_equivalent)
            records.append(created.to_dict())
            return created
