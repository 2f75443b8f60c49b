# hackmap/auth.py
"""Password hashing and cookie sessions.

- Passwords: werkzeug's salted hashes
- Sessions: random tokens stored in user_sessions, sent as an http-only cookie
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Optional

from fastapi import Response
from sqlalchemy.orm import Session, joinedload
from werkzeug.security import check_password_hash, generate_password_hash

from hackmap import config
from hackmap.data_client.models import User, UserSession
from hackmap.utils import utcnow

logger = logging.getLogger("hackmap.auth")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(user: User, password: str) -> bool:
    if not user.password_hash:
        return False
    return check_password_hash(user.password_hash, password)


def create_session(session: Session, user: User, max_age_seconds: Optional[int] = None) -> UserSession:
    max_age = max_age_seconds if max_age_seconds is not None else config.SESSION_MAX_AGE_SECONDS
    user_session = UserSession(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        expires_at=utcnow() + timedelta(seconds=max_age),
    )
    session.add(user_session)
    session.flush()
    return user_session


def resolve_session(session: Session, token: Optional[str]) -> Optional[User]:
    """Return the user behind a session token, or None if missing/expired."""
    if not token:
        return None
    user_session = (
        session.query(UserSession)
        .options(joinedload(UserSession.user))
        .filter(UserSession.token == token)
        .first()
    )
    if user_session is None:
        return None
    if user_session.expires_at <= utcnow():
        logger.info("Expired session for user %s", user_session.user_id)
        session.delete(user_session)
        session.commit()
        return None
    return user_session.user


def delete_session(session: Session, token: Optional[str]) -> None:
    if not token:
        return
    session.query(UserSession).filter(UserSession.token == token).delete()


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=config.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=config.COOKIE_SECURE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=config.SESSION_COOKIE_NAME)
