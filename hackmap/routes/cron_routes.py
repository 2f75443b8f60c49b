# hackmap/routes/cron_routes.py
"""Scheduled-job triggers (called by an external scheduler)."""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from hackmap import config
from hackmap.dependencies import get_mailer, get_session
from hackmap.email_client.mailer import Mailer
from hackmap.errors import NotAuthenticated
from hackmap.reminders import run_deadline_reminders
from hackmap.schemas import CronTriggerRequest

logger = logging.getLogger("hackmap.cron")

router = APIRouter(prefix="/api/cron", tags=["cron"])


def _secret_matches(candidate: Optional[str]) -> bool:
    if not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), config.CRON_SECRET.encode("utf-8"))


@router.get("/deadline-reminders")
async def deadline_reminders(
    authorization: Optional[str] = Header(None),
    session: Session = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
):
    if config.CRON_SECRET:
        token = (authorization or "").removeprefix("Bearer ").strip()
        if not _secret_matches(token):
            raise NotAuthenticated("Unauthorized")

    report = await run_deadline_reminders(session, mailer)
    return report.to_dict()


@router.post("/deadline-reminders")
async def trigger_deadline_reminders(
    req: CronTriggerRequest,
    session: Session = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
):
    if not config.CRON_SECRET or not _secret_matches(req.authorization):
        raise NotAuthenticated("Unauthorized")

    logger.info("Deadline reminders triggered manually")
    report = await run_deadline_reminders(session, mailer)
    return report.to_dict()
