# hackmap/routes/hackathon_routes.py
"""Hackathon discovery, creation and participant registration."""

from __future__ import annotations

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from hackmap.data_client.models import Hackathon, HackathonRegistration, Team, User
from hackmap.data_client.queries import registration_counts
from hackmap.dependencies import get_current_user, get_session
from hackmap.errors import Conflict, NotFound, ValidationFailed
from hackmap.schemas import HackathonCreateRequest
from hackmap.utils import clean_labels, utcnow

logger = logging.getLogger("hackmap.hackathons")

router = APIRouter(prefix="/api/hackathons", tags=["hackathons"])

PAGE_SIZE = 12
_STATUSES = {"upcoming", "ongoing", "registration_open"}


def _get_hackathon(session: Session, hackathon_id: str) -> Hackathon:
    hackathon = session.get(Hackathon, hackathon_id)
    if hackathon is None:
        raise NotFound("Hackathon not found")
    return hackathon


@router.get("")
def list_hackathons(
    search: Optional[str] = None,
    theme: Optional[str] = None,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    session: Session = Depends(get_session),
):
    now = utcnow()
    query = session.query(Hackathon)

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Hackathon.title.ilike(pattern), Hackathon.description.ilike(pattern)))
    if theme:
        query = query.filter(Hackathon.theme == theme)
    if status:
        if status not in _STATUSES:
            raise ValidationFailed(f"Invalid status '{status}'. Expected upcoming|ongoing|registration_open.")
        if status == "upcoming":
            query = query.filter(Hackathon.start_date > now)
        elif status == "ongoing":
            query = query.filter(and_(Hackathon.start_date <= now, Hackathon.end_date >= now))
        else:
            query = query.filter(Hackathon.registration_deadline > now)

    total = query.count()
    hackathons = (
        query.order_by(Hackathon.start_date.asc(), Hackathon.id)
        .offset((page - 1) * PAGE_SIZE)
        .limit(PAGE_SIZE)
        .all()
    )
    counts = registration_counts(session, [h.id for h in hackathons])

    return {
        "hackathons": [
            {
                **h.to_dict(),
                "registrationCount": counts.get(h.id, 0),
                "_count": {"registrations": counts.get(h.id, 0)},
            }
            for h in hackathons
        ],
        "pagination": {
            "page": page,
            "limit": PAGE_SIZE,
            "total": total,
            "pages": math.ceil(total / PAGE_SIZE),
        },
    }


@router.post("", status_code=201)
def create_hackathon(
    req: HackathonCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    hackathon = Hackathon(
        title=req.title.strip(),
        description=req.description,
        theme=req.theme,
        start_date=req.start_date,
        end_date=req.end_date,
        registration_deadline=req.registration_deadline,
        max_team_size=req.max_team_size,
        prizes=clean_labels(req.prizes),
        tags=clean_labels(req.tags),
        organizer_id=user.id,
    )
    session.add(hackathon)
    session.commit()
    logger.info("Hackathon %s created by %s", hackathon.id, user.id)
    return hackathon.to_dict()


@router.get("/{hackathon_id}")
def get_hackathon(hackathon_id: str, session: Session = Depends(get_session)):
    hackathon = _get_hackathon(session, hackathon_id)
    registrations = (
        session.query(func.count(HackathonRegistration.id))
        .filter(HackathonRegistration.hackathon_id == hackathon.id)
        .scalar()
    )
    teams = session.query(func.count(Team.id)).filter(Team.hackathon_id == hackathon.id).scalar()
    organizer = hackathon.organizer
    return {
        **hackathon.to_dict(),
        "organizer": organizer.summary() if organizer else None,
        "_count": {"registrations": registrations or 0, "teams": teams or 0},
    }


@router.post("/{hackathon_id}/register", status_code=201)
def register_for_hackathon(
    hackathon_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    hackathon = _get_hackathon(session, hackathon_id)

    if utcnow() > hackathon.registration_deadline:
        raise ValidationFailed("Registration deadline has passed")

    existing = (
        session.query(HackathonRegistration)
        .filter_by(user_id=user.id, hackathon_id=hackathon.id)
        .first()
    )
    if existing:
        raise Conflict("Already registered for this hackathon")

    registration = HackathonRegistration(user_id=user.id, hackathon_id=hackathon.id)
    session.add(registration)
    session.commit()

    return {
        **registration.to_dict(),
        "user": {"id": user.id, "name": user.name, "email": user.email, "image": user.image},
        "hackathon": {"id": hackathon.id, "title": hackathon.title, "description": hackathon.description},
    }


@router.delete("/{hackathon_id}/register")
def unregister_from_hackathon(
    hackathon_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    hackathon = _get_hackathon(session, hackathon_id)

    if utcnow() >= hackathon.start_date:
        raise ValidationFailed("Cannot unregister after hackathon has started")

    deleted = (
        session.query(HackathonRegistration)
        .filter_by(user_id=user.id, hackathon_id=hackathon.id)
        .delete()
    )
    if not deleted:
        raise NotFound("Registration not found")
    session.commit()
    return {"success": True}
