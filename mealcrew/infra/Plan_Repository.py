from typing import List, Optional
from uuid import uuid4

from mealcrew.domain.Plan import Plan
from mealcrew.infra.json_store import JsonRepository
from mealcrew.infra.paths import PLANS_FILE
from mealcrew.utilities.clock import utcnow
from mealcrew.utilities.constants import PLAN_COLLECTING, PLAN_DRAFT, PLAN_FINALIZED


class PlanRepository(JsonRepository[Plan]):
    filename = PLANS_FILE
    entity = Plan

    def create(self, user_id: str, name: str, week_start, group_ids: List[str], notes: Optional[str] = None) -> Plan:
        plan = Plan(id=str(uuid4()), user_id=user_id, name=name, week_start=week_start,
                    group_ids=group_ids, notes=notes or "", status=PLAN_DRAFT)
        return self.add(plan)

    def list_for_user(self, user_id: str) -> List[Plan]:
        plans = self.find(lambda p: p.user_id == user_id)
        plans.sort(key=lambda p: (p.week_start is not None, p.week_start), reverse=True)
        return plans

    def get_owned(self, plan_id: str, user_id: str) -> Optional[Plan]:
        plan = self.get(plan_id)
        if plan is None or plan.user_id != user_id:
            return None
        return plan

    def mark_collecting(self, plan: Plan) -> Plan:
        """draft -> collecting; other statuses are left as they are."""
        if plan.status == PLAN_DRAFT:
            plan.status = PLAN_COLLECTING
            plan.touch()
            self.update(plan)
        return plan

    def finalize(self, plan: Plan, selections: dict) -> Plan:
        plan.selections = {day: list(ids) for day, ids in selections.items()}
        plan.status = PLAN_FINALIZED
        plan.finalized_at = utcnow()
        plan.touch()
        return self.update(plan)
