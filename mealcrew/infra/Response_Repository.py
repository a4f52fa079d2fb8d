from datetime import datetime
from typing import List, Optional

from mealcrew.domain.FormResponse import FormResponse
from mealcrew.infra.json_store import JsonRepository
from mealcrew.infra.paths import FORM_RESPONSES_FILE


class ResponseRepository(JsonRepository[FormResponse]):
    filename = FORM_RESPONSES_FILE
    entity = FormResponse

    def list_for_plan(self, plan_id: str) -> List[FormResponse]:
        """Responses of a plan, newest first."""
        responses = self.find(lambda r: r.plan_id == plan_id)
        responses.sort(key=lambda r: r.submitted_at, reverse=True)
        return responses

    def list_for_link(self, form_link_id: str) -> List[FormResponse]:
        responses = self.find(lambda r: r.form_link_id == form_link_id)
        responses.sort(key=lambda r: r.submitted_at, reverse=True)
        return responses

    def latest_for_link(self, form_link_id: str) -> Optional[FormResponse]:
        responses = self.list_for_link(form_link_id)
        return responses[0] if responses else None

    def find_duplicate(self, form_link_id: str, selections: dict, since: datetime,
                       idempotency_key: Optional[str] = None) -> Optional[FormResponse]:
        """A response on this link submitted at or after `since` carrying identical
        selections, and the same idempotency key when one is given."""
        for r in self.list_for_link(form_link_id):
            if r.submitted_at < since:
                continue
            if idempotency_key and r.idempotency_key != idempotency_key:
                continue
            if r.selections == selections:
                return r
        return None
