from datetime import datetime
from typing import Dict, List, Optional, Tuple

from mealcrew.domain.FormLink import FormLink
from mealcrew.infra.json_store import JsonRepository
from mealcrew.infra.paths import FORM_LINKS_FILE
from mealcrew.logic.forms.links import issue_links


class FormLinkRepository(JsonRepository[FormLink]):
    filename = FORM_LINKS_FILE
    entity = FormLink

    def list_for_plan(self, plan_id: str) -> List[FormLink]:
        links = self.find(lambda l: l.plan_id == plan_id)
        links.sort(key=lambda l: l.created_at, reverse=True)
        return links

    def get_by_token(self, public_token: str) -> Optional[FormLink]:
        for r in self.store.load():
            if r.get('public_token') == public_token:
                return FormLink.from_dict(r)
        return None

    def get_by_short_code(self, short_code: str) -> Optional[FormLink]:
        for r in self.store.load():
            if r.get('short_code') == short_code:
                return FormLink.from_dict(r)
        return None

    def save_many(self, links: List[FormLink]) -> None:
        """Insert new links and overwrite existing ones (matched by id) in one write."""
        by_id = {l.id: l for l in links}
        with self.store.transaction() as records:
            for idx, r in enumerate(records):
                link = by_id.pop(r.get('id'), None)
                if link is not None:
                    records[idx] = link.to_dict()
            records.extend(l.to_dict() for l in by_id.values())

    def increment_views(self, link_id: str) -> int:
        with self.store.transaction() as records:
            for r in records:
                if r.get('id') == link_id:
                    r['views_count'] = int(r.get('views_count') or 0) + 1
                    return r['views_count']
        return 0

    def issue_for_plan(self, plan_id: str, now: Optional[datetime] = None) -> Tuple[Dict[str, FormLink], List[FormLink]]:
        """Reuse or mint one active link per role under the file lock.

        Returns (links by role, newly minted links).
        """
        with self.store.transaction() as records:
            existing = [FormLink.from_dict(r) for r in records]
            by_role, created = issue_links(plan_id, [l for l in existing if l.plan_id == plan_id], now,
                                           taken_codes={l.short_code for l in existing})
            records.extend(l.to_dict() for l in created)
        return by_role, created
