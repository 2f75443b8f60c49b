# hackmap/dependencies.py
"""FastAPI dependencies.

Shared handles (Database, Mailer) live on app.state; they are created and
closed by the application lifespan in main.py.
"""

from __future__ import annotations

from typing import Iterator, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from hackmap import config
from hackmap.auth import resolve_session
from hackmap.data_client.database import Database
from hackmap.data_client.models import User
from hackmap.email_client.mailer import Mailer
from hackmap.errors import NotAuthenticated


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_session(database: Database = Depends(get_database)) -> Iterator[Session]:
    session = database.session()
    try:
        yield session
    finally:
        session.close()


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(config.SESSION_COOKIE_NAME)


def get_optional_user(
    request: Request,
    session: Session = Depends(get_session),
    database: Database = Depends(get_database),
) -> Optional[User]:
    token = get_session_token(request)
    return database.with_retry(lambda: resolve_session(session, token), session=session)


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise NotAuthenticated("Unauthorized")
    return user
