# hackmap/reminders.py
"""Deadline reminder job.

Finds hackathons whose registration deadline falls within the next
REMINDER_WINDOW_DAYS and nudges every registered participant who has not joined
a team yet: one in-app notification plus one email each.

Email failures are collected in the report, never raised; one bad address
must not stop the batch.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session, selectinload

from hackmap.data_client.models import Hackathon, HackathonRegistration, User
from hackmap.data_client.queries import has_team_in_hackathon
from hackmap.email_client.mailer import Mailer
from hackmap.errors import EmailDeliveryError
from hackmap.notifications import create_deadline_reminder_notification
from hackmap.utils import utcnow

logger = logging.getLogger("hackmap.reminders")

REMINDER_WINDOW_DAYS = 3
TEAM_FORMATION = "Team Formation"


@dataclass
class ReminderReport:
    emails_sent: int = 0
    notifications_created: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": True,
            "emailsSent": self.emails_sent,
            "message": f"Sent {self.emails_sent} deadline reminder emails",
        }
        if self.errors:
            data["errors"] = list(self.errors)
        return data


def days_until(deadline: datetime, now: datetime) -> int:
    return math.ceil((deadline - now).total_seconds() / 86400)


def users_without_team(session: Session, hackathon: Hackathon) -> List[User]:
    out: List[User] = []
    for registration in hackathon.registrations:
        user = registration.user
        if user is None:
            continue
        if not has_team_in_hackathon(session, user.id, hackathon.id):
            out.append(user)
    return out


@dataclass
class PendingReminder:
    user: User
    hackathon_id: str
    hackathon_title: str
    deadline: str
    days_left: int


def prepare_deadline_reminders(session: Session, now: datetime) -> List[PendingReminder]:
    """Create the in-app notifications and return the emails still to send."""
    window_end = now + timedelta(days=REMINDER_WINDOW_DAYS)

    hackathons = (
        session.query(Hackathon)
        .options(selectinload(Hackathon.registrations).selectinload(HackathonRegistration.user))
        .filter(Hackathon.registration_deadline >= now)
        .filter(Hackathon.registration_deadline <= window_end)
        .order_by(Hackathon.registration_deadline)
        .all()
    )

    pending: List[PendingReminder] = []
    for hackathon in hackathons:
        days_left = days_until(hackathon.registration_deadline, now)
        if not 0 < days_left <= REMINDER_WINDOW_DAYS:
            continue

        deadline_label = hackathon.registration_deadline.strftime("%Y-%m-%d")
        for user in users_without_team(session, hackathon):
            create_deadline_reminder_notification(
                session, user.id, hackathon.title, TEAM_FORMATION, days_left
            )
            pending.append(
                PendingReminder(
                    user=user,
                    hackathon_id=hackathon.id,
                    hackathon_title=hackathon.title,
                    deadline=deadline_label,
                    days_left=days_left,
                )
            )

    session.commit()
    logger.info("Deadline reminders: %s hackathon(s) in window", len(hackathons))
    return pending


async def run_deadline_reminders(
    session: Session,
    mailer: Mailer,
    now: Optional[datetime] = None,
) -> ReminderReport:
    pending = await run_in_threadpool(prepare_deadline_reminders, session, now or utcnow())

    report = ReminderReport(notifications_created=len(pending))
    for reminder in pending:
        user = reminder.user
        if not user.email:
            continue
        try:
            sent = await mailer.send_deadline_reminder_email(
                recipient=user,
                hackathon_id=reminder.hackathon_id,
                hackathon_title=reminder.hackathon_title,
                deadline_type=TEAM_FORMATION,
                deadline=reminder.deadline,
                days_left=reminder.days_left,
            )
        except EmailDeliveryError as exc:
            report.errors.append(f"Failed to send registration reminder to {user.email}: {exc}")
            continue
        if sent:
            report.emails_sent += 1

    logger.info(
        "Deadline reminders: %s email(s), %s notification(s), %s error(s)",
        report.emails_sent,
        report.notifications_created,
        len(report.errors),
    )
    return report
