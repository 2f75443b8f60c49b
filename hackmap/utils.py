# hackmap/utils.py
"""
Utility helpers used across the backend.

Goals:
- One notion of "now": naive UTC datetimes, matching what the database stores
- Small typed coercion helpers for loosely-shaped JSON columns
- Invite code generation
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional


# ----------------------------------------------------------------------
# 1) Time
# ----------------------------------------------------------------------
def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize an incoming datetime to naive UTC.

    - aware datetimes are converted to UTC, then stripped
    - naive datetimes are assumed to already be UTC
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# ----------------------------------------------------------------------
# 2) Coercion helpers (JSON columns can hold anything)
# ----------------------------------------------------------------------
def as_list_str(x: Any) -> List[str]:
    """Return the string entries of x if it is a list, else []."""
    if not isinstance(x, list):
        return []
    return [i for i in x if isinstance(i, str)]


def dedup_keep_order(items: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for it in items:
        if it in seen:
            continue
        seen.add(it)
        out.append(it)
    return out


def clean_labels(items: Iterable[str]) -> List[str]:
    """Strip entries, drop blanks and exact duplicates (order kept)."""
    return dedup_keep_order(s.strip() for s in items if isinstance(s, str) and s.strip())


# ----------------------------------------------------------------------
# 3) Invite codes
# ----------------------------------------------------------------------
INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 8


def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


__all__ = [
    "utcnow",
    "to_naive_utc",
    "isoformat",
    "as_list_str",
    "dedup_keep_order",
    "clean_labels",
    "INVITE_CODE_ALPHABET",
    "INVITE_CODE_LENGTH",
    "generate_invite_code",
]
