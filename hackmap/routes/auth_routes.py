# hackmap/routes/auth_routes.py
"""Account registration and cookie sessions."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hackmap.auth import (
    clear_session_cookie,
    create_session,
    delete_session,
    hash_password,
    set_session_cookie,
    verify_password,
)
from hackmap.data_client.database import Database
from hackmap.data_client.models import User
from hackmap.data_client.queries import get_user_by_email
from hackmap.dependencies import get_current_user, get_database, get_session, get_session_token
from hackmap.errors import Conflict, NotAuthenticated
from hackmap.schemas import LoginRequest, RegisterRequest

logger = logging.getLogger("hackmap.auth")

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201)
def register(
    req: RegisterRequest,
    session: Session = Depends(get_session),
    database: Database = Depends(get_database),
):
    email = req.email.lower()
    existing = database.with_retry(lambda: get_user_by_email(session, email), session=session)
    if existing:
        raise Conflict("User already exists")

    def _create() -> User:
        user = User(name=req.name.strip(), email=email, password_hash=hash_password(req.password), skills=[])
        session.add(user)
        session.commit()
        return user

    try:
        user = database.with_retry(_create, session=session)
    except IntegrityError:
        session.rollback()
        raise Conflict("User already exists")

    logger.info("New user registered: %s", user.id)
    return {"message": "User created successfully", "userId": user.id}


@router.post("/login")
def login(
    req: LoginRequest,
    session: Session = Depends(get_session),
    database: Database = Depends(get_database),
):
    user = database.with_retry(lambda: get_user_by_email(session, req.email.lower()), session=session)
    if user is None or not verify_password(user, req.password):
        raise NotAuthenticated("Invalid email or password")

    user_session = create_session(session, user)
    session.commit()

    response = JSONResponse(content={"user": user.to_dict()})
    set_session_cookie(response, user_session.token)
    return response


@router.post("/logout")
def logout(request: Request, response: Response, session: Session = Depends(get_session)):
    delete_session(session, get_session_token(request))
    session.commit()
    clear_session_cookie(response)
    return {"success": True}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return user.to_dict()
