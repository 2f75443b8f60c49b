# hackmap/routes/stats_routes.py
"""Public landing-page counters."""

from typing import Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from hackmap.data_client.database import Database
from hackmap.data_client.models import Hackathon, Project, Team, User
from hackmap.dependencies import get_database, get_session
from hackmap.utils import utcnow

router = APIRouter(tags=["stats"])

FALLBACK_STATS: List[Dict[str, str]] = [
    {"label": "Active Hackathons", "value": "3+"},
    {"label": "Registered Users", "value": "100+"},
    {"label": "Teams Formed", "value": "25+"},
    {"label": "Projects Created", "value": "50+"},
]


def _collect_stats(session: Session) -> List[Dict[str, str]]:
    active = (
        session.query(func.count(Hackathon.id))
        .filter(Hackathon.registration_deadline >= utcnow())
        .scalar()
    )
    users = session.query(func.count(User.id)).scalar() or 0
    teams = session.query(func.count(Team.id)).scalar()
    projects = session.query(func.count(Project.id)).scalar()
    return [
        {"label": "Active Hackathons", "value": f"{active or 0}+"},
        # rounded down to the nearest hundred
        {"label": "Registered Users", "value": f"{(users // 100) * 100}+"},
        {"label": "Teams Formed", "value": f"{teams or 0}+"},
        {"label": "Projects Created", "value": f"{projects or 0}+"},
    ]


@router.get("/api/stats")
def get_stats(session: Session = Depends(get_session), database: Database = Depends(get_database)):
    return database.safe_operation(
        lambda: _collect_stats(session),
        fallback=[dict(s) for s in FALLBACK_STATS],
        session=session,
    )
