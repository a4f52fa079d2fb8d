import secrets
from datetime import timedelta
from typing import Optional
from uuid import NAMESPACE_URL, uuid5

from mealcrew.domain.Session import Session
from mealcrew.infra.json_store import JsonRepository
from mealcrew.infra.paths import SESSIONS_FILE
from mealcrew.utilities.clock import utcnow
from mealcrew.utilities.config import SESSION_TTL_DAYS


def user_id_for(email: str) -> str:
    """Stable user id derived from the normalized e-mail address."""
    return str(uuid5(NAMESPACE_URL, f"mailto:{email.strip().lower()}"))


class SessionRepository(JsonRepository[Session]):
    filename = SESSIONS_FILE
    entity = Session

    def open(self, email: str) -> Session:
        now = utcnow()
        session = Session(id=secrets.token_urlsafe(32), user_id=user_id_for(email), email=email,
                          created_at=now, expires_at=now + timedelta(days=SESSION_TTL_DAYS))
        with self.store.transaction() as records:
            # drop expired sessions while we are writing anyway
            records[:] = [r for r in records if Session.from_dict(r).is_valid(now)]
            records.append(session.to_dict())
        return session

    def resolve(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        session = self.get(session_id)
        if session is None or not session.is_valid():
            return None
        return session

    def close(self, session_id: str) -> bool:
        return self.delete(session_id)
