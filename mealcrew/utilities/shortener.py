"""Short codes for public form links.

A short code is a role prefix ('cm' for co_manager, 'ot' for other) followed by
six base62 characters, e.g. ``cm4fQz9a``. Public URLs take the form
``{APP_BASE_URL}/f/{short_code}``.

Resolved mappings are cached in a process-local dict. The cache is an
accelerator only: the short code is also stored on the FormLink record, so a
miss falls back to the repository (see ``mealcrew.logic.forms.links``).
"""
from __future__ import annotations
import re
import secrets
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional

from mealcrew.utilities.config import APP_BASE_URL
from mealcrew.utilities.constants import SHORT_CODE_PREFIXES

logger = logging.getLogger(__name__)

BASE62_CHARS = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz'
SHORT_CODE_LENGTH = 8
MAX_CACHE_ENTRIES = 10000

_PROBLEMATIC_PATTERNS = [
    re.compile(r'^(cm|ot)(000|111|aaa)', re.I),
    re.compile(r'^(cm|ot).*(fuck|shit|damn)', re.I),
    re.compile(r'^(cm|ot)(api|www|app|dev)', re.I),
]
_SUFFIX_RE = re.compile(r'^[0-9A-Za-z]+$')


class ShortCodeError(RuntimeError):
    pass


def generate_short_code(role: str, max_retries: int = 5) -> str:
    prefix = SHORT_CODE_PREFIXES[role]
    suffix_len = SHORT_CODE_LENGTH - len(prefix)
    for _ in range(max_retries):
        code = prefix + ''.join(secrets.choice(BASE62_CHARS) for _ in range(suffix_len))
        if not has_problematic_pattern(code):
            return code
    raise ShortCodeError('Failed to generate short code after maximum retries')


def has_problematic_pattern(code: str) -> bool:
    return any(p.search(code) for p in _PROBLEMATIC_PATTERNS)


def extract_role_from_short_code(short_code: str) -> Optional[str]:
    for role, prefix in SHORT_CODE_PREFIXES.items():
        if short_code.startswith(prefix):
            return role
    return None


def is_valid_short_code(short_code) -> bool:
    if not isinstance(short_code, str) or len(short_code) != SHORT_CODE_LENGTH:
        return False
    if extract_role_from_short_code(short_code) is None:
        return False
    return bool(_SUFFIX_RE.match(short_code[2:]))


def generate_public_url(short_code: str, base_url: Optional[str] = None) -> str:
    base = (base_url or APP_BASE_URL).rstrip('/')
    return f"{base}/f/{short_code}"


# -------------------- In-memory mapping cache --------------------
@dataclass
class ShortCodeMapping:
    short_code: str
    public_token: str
    role: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    views: int = 0


_lock = Lock()
_cache: Dict[str, ShortCodeMapping] = {}


def cache_mapping(mapping: ShortCodeMapping) -> None:
    with _lock:
        _cache[mapping.short_code] = mapping
        if len(_cache) > MAX_CACHE_ENTRIES:
            now = datetime.now(timezone.utc)
            for code in [c for c, m in _cache.items() if m.expires_at and m.expires_at <= now]:
                del _cache[code]


def resolve_short_code(short_code: str, now: Optional[datetime] = None) -> Optional[ShortCodeMapping]:
    now = now or datetime.now(timezone.utc)
    with _lock:
        mapping = _cache.get(short_code)
        if mapping is None:
            return None
        if mapping.expires_at and mapping.expires_at <= now:
            del _cache[short_code]
            return None
        return mapping


def increment_views(short_code: str) -> None:
    with _lock:
        mapping = _cache.get(short_code)
        if mapping:
            mapping.views += 1


def forget(short_code: str) -> None:
    with _lock:
        _cache.pop(short_code, None)


def clear_cache() -> None:
    with _lock:
        _cache.clear()


__all__ = [
    'ShortCodeMapping', 'ShortCodeError', 'generate_short_code', 'has_problematic_pattern',
    'extract_role_from_short_code', 'is_valid_short_code', 'generate_public_url',
    'cache_mapping', 'resolve_short_code', 'increment_views', 'forget', 'clear_cache',
]
