"""Form link lifecycle.

A plan gets two public links, one per role. `issue_links` keeps at most one
active link per (plan, role): an active link is handed out again, otherwise a
fresh one is minted. Old links stay in storage as inactive history.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import uuid4

from mealcrew.domain.FormLink import FormLink
from mealcrew.utilities.clock import utcnow
from mealcrew.utilities.config import FORM_LINK_TTL_DAYS
from mealcrew.utilities.constants import FORM_ROLES
from mealcrew.utilities.shortener import (
    ShortCodeMapping, cache_mapping, forget, generate_short_code, is_valid_short_code,
    resolve_short_code,
)

logger = logging.getLogger(__name__)

__all__ = [
    'new_public_token', 'mint_link', 'issue_links', 'is_expired', 'is_active', 'revoke',
    'remember_link', 'resolve_link',
]


def new_public_token() -> str:
    # 32 random bytes, base64url without padding
    return secrets.token_urlsafe(32)


def is_expired(link: FormLink, now: Optional[datetime] = None) -> bool:
    return link.is_expired(now)


def is_active(link: FormLink, now: Optional[datetime] = None) -> bool:
    return link.is_active(now)


def mint_link(plan_id: str, role: str, now: Optional[datetime] = None,
              taken_codes: Optional[Set[str]] = None) -> FormLink:
    now = now or utcnow()
    taken_codes = taken_codes or set()
    short_code = generate_short_code(role)
    while short_code in taken_codes:
        short_code = generate_short_code(role)
    return FormLink(
        id=str(uuid4()),
        plan_id=plan_id,
        public_token=new_public_token(),
        short_code=short_code,
        role=role,
        created_at=now,
        expires_at=now + timedelta(days=FORM_LINK_TTL_DAYS),
    )


def issue_links(plan_id: str, existing_links: Iterable[FormLink], now: Optional[datetime] = None,
                taken_codes: Optional[Set[str]] = None) -> Tuple[Dict[str, FormLink], List[FormLink]]:
    """Return (links by role, newly minted links) for the plan."""
    now = now or utcnow()
    taken = set(taken_codes or ())
    by_role: Dict[str, FormLink] = {}
    for link in sorted(existing_links, key=lambda l: l.created_at, reverse=True):
        if link.plan_id != plan_id or link.role in by_role:
            continue
        if link.is_active(now):
            by_role[link.role] = link

    created: List[FormLink] = []
    for role in FORM_ROLES:
        if role in by_role:
            continue
        link = mint_link(plan_id, role, now, taken)
        taken.add(link.short_code)
        by_role[role] = link
        created.append(link)
        logger.info("Minted %s link %s for plan %s", role, link.short_code, plan_id)
    return by_role, created


def revoke(links: Iterable[FormLink], role: Optional[str] = None,
           now: Optional[datetime] = None) -> List[FormLink]:
    """Stamp revoked_at on the active links (of one role, if given). Returns the revoked links."""
    now = now or utcnow()
    revoked = []
    for link in links:
        if role and link.role != role:
            continue
        if not link.is_active(now):
            continue
        link.revoked_at = now
        forget(link.short_code)
        revoked.append(link)
    return revoked


def remember_link(link: FormLink) -> None:
    """Put a link's short code into the in-process lookup cache."""
    if link.short_code:
        cache_mapping(ShortCodeMapping(
            short_code=link.short_code,
            public_token=link.public_token,
            role=link.role,
            created_at=link.created_at,
            expires_at=link.expires_at,
            views=link.views_count,
        ))


def resolve_link(token: str, repo) -> Optional[FormLink]:
    """Find the link addressed by a public token or a short code.

    Short codes go through the cache first and fall back to storage, which
    refills the cache. The returned link may be expired or revoked.
    """
    if not token:
        return None
    if is_valid_short_code(token):
        mapping = resolve_short_code(token)
        if mapping is not None:
            link = repo.get_by_token(mapping.public_token)
            if link is not None:
                return link
        link = repo.get_by_short_code(token)
        if link is not None:
            remember_link(link)
            return link
    return repo.get_by_token(token)
