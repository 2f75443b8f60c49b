"""
Mail client wrapper

Supports:
- MAIL_PROVIDER=console -> no network, messages logged and kept in `outbox`
- MAIL_PROVIDER=smtp    -> smtplib (STARTTLS, or SSL on port 465) in a worker thread

Includes:
- tenacity retry on transient connection errors
- aiobreaker circuit breaker
- Prometheus metrics (emails by kind + outcome)
- Per-recipient preference checks for users who opted out
"""

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from datetime import timedelta
from email.message import EmailMessage
from email.utils import formataddr
from typing import Callable, List, Optional

from aiobreaker import CircuitBreaker, CircuitBreakerError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from hackmap import config
from hackmap.data_client.models import User
from hackmap.email_client.templates import (
    EmailMessageContent,
    render_deadline_reminder,
    render_join_request,
    render_team_invite,
    render_team_update,
)
from hackmap.errors import EmailDeliveryError
from hackmap.metrics import EMAILS_SENT

logger = logging.getLogger("hackmap.mailer")

# Preference keys stored on User.notification_preferences
PREF_TEAM_INVITES = "teamInvites"
PREF_JOIN_REQUESTS = "joinRequests"
PREF_DEADLINE_REMINDERS = "deadlineReminders"
PREF_TEAM_UPDATES = "teamUpdates"


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(
        exc,
        (
            smtplib.SMTPServerDisconnected,
            smtplib.SMTPConnectError,
            ConnectionError,
            TimeoutError,
        ),
    )


@retry(
    reraise=True,
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    retry=retry_if_exception(_is_retryable),
)
async def _send_with_retry(send: Callable[[EmailMessage], None], message: EmailMessage) -> None:
    await asyncio.to_thread(send, message)


def email_allowed(recipient: Optional[User], preference: str) -> bool:
    """Users can opt out globally or per kind; unknown recipients always get mail."""
    if recipient is None:
        return True
    if not recipient.email_notifications:
        return False
    return recipient.preferences().get(preference, True)


@dataclass
class SentEmail:
    to: str
    subject: str
    html: str
    kind: str


class Mailer:
    """
    Unified mail client for console / smtp.

    base_url is the public web URL used to build links in messages.
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        base_url: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        from_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.provider = (provider or config.MAIL_PROVIDER).lower()
        self.base_url = (base_url if base_url is not None else config.APP_BASE_URL).rstrip("/")
        self.host = host or config.SMTP_HOST
        self.port = port or config.SMTP_PORT
        self.user = user if user is not None else config.SMTP_USER
        self.password = password if password is not None else config.SMTP_PASS
        self.from_name = from_name or config.MAIL_FROM_NAME
        self.timeout = timeout or config.MAIL_TIMEOUT_SECONDS
        self.outbox: List[SentEmail] = []

        # 5 failures -> open for 30s
        self.breaker = CircuitBreaker(fail_max=5, timeout_duration=timedelta(seconds=30))

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _build_message(self, to: str, content: EmailMessageContent) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = content.subject
        message["From"] = formataddr((self.from_name, self.user))
        message["To"] = to
        message.set_content("This message requires an HTML capable email client.")
        message.add_alternative(content.html, subtype="html")
        return message

    def _smtp_send(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                if self.password:
                    server.login(self.user, self.password)
                server.send_message(message)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=context)
                if self.password:
                    server.login(self.user, self.password)
                server.send_message(message)

    async def send(self, to: str, content: EmailMessageContent, kind: str = "generic") -> None:
        """
        Deliver one message. Raises EmailDeliveryError on failure.
        """
        if self.provider == "console":
            logger.info("MAIL[console] → %s | %s", to, content.subject)
            self.outbox.append(SentEmail(to=to, subject=content.subject, html=content.html, kind=kind))
            EMAILS_SENT.labels(kind=kind, outcome="console").inc()
            return

        message = self._build_message(to, content)
        logger.debug("MAIL[smtp] → %s:%s | to=%s subject=%s", self.host, self.port, to, content.subject)

        try:
            await self.breaker.call_async(_send_with_retry, self._smtp_send, message)
        except CircuitBreakerError:
            logger.warning("Mail circuit breaker OPEN – message to %s blocked", to)
            EMAILS_SENT.labels(kind=kind, outcome="circuit_breaker").inc()
            raise EmailDeliveryError("Email service temporarily unavailable (circuit breaker open).")
        except Exception as exc:
            logger.error("Failed to send %s email to %s: %s", kind, to, exc)
            EMAILS_SENT.labels(kind=kind, outcome="failure").inc()
            raise EmailDeliveryError(f"Email delivery failed: {exc}") from exc

        EMAILS_SENT.labels(kind=kind, outcome="success").inc()
        logger.info("%s email sent to %s", kind, to)

    def verify(self) -> bool:
        """Check SMTP connectivity and credentials (console is always valid)."""
        if self.provider == "console":
            return True
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=ssl.create_default_context())
                if self.password:
                    server.login(self.user, self.password)
            return True
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Email configuration error: %s", exc)
            return False

    # ------------------------------------------------------------------
    # Messages
    #
    # Each returns False when the recipient opted out, True once delivered.
    # ------------------------------------------------------------------
    async def send_team_invite_email(
        self,
        recipient_email: str,
        team_name: str,
        hackathon_title: str,
        invite_code: str,
        inviter_name: str,
        recipient: Optional[User] = None,
    ) -> bool:
        if not email_allowed(recipient, PREF_TEAM_INVITES):
            logger.info("Team invite email skipped for %s due to user preferences", recipient_email)
            return False
        content = render_team_invite(
            team_name=team_name,
            hackathon_title=hackathon_title,
            invite_code=invite_code,
            invite_url=f"{self.base_url}/teams/join?code={invite_code}",
            inviter_name=inviter_name,
        )
        await self.send(recipient_email, content, kind="team_invite")
        return True

    async def send_join_request_email(
        self,
        leader: User,
        team_name: str,
        hackathon_title: str,
        requester_name: str,
        requester_email: str,
    ) -> bool:
        if not email_allowed(leader, PREF_JOIN_REQUESTS):
            logger.info("Join request email skipped for %s due to user preferences", leader.email)
            return False
        content = render_join_request(
            team_name=team_name,
            hackathon_title=hackathon_title,
            requester_name=requester_name,
            requester_email=requester_email,
            team_leader_name=leader.display_name,
            dashboard_url=f"{self.base_url}/dashboard",
        )
        await self.send(leader.email, content, kind="join_request")
        return True

    async def send_deadline_reminder_email(
        self,
        recipient: User,
        hackathon_id: str,
        hackathon_title: str,
        deadline_type: str,
        deadline: str,
        days_left: int,
    ) -> bool:
        if not email_allowed(recipient, PREF_DEADLINE_REMINDERS):
            logger.info("Deadline reminder email skipped for %s due to user preferences", recipient.email)
            return False
        content = render_deadline_reminder(
            user_name=recipient.display_name,
            hackathon_title=hackathon_title,
            deadline_type=deadline_type,
            deadline=deadline,
            days_left=days_left,
            action_url=f"{self.base_url}/hackathons/{hackathon_id}",
        )
        await self.send(recipient.email, content, kind="deadline_reminder")
        return True

    async def send_team_update_email(
        self,
        recipient: User,
        team_id: str,
        team_name: str,
        hackathon_title: str,
        update_type: str,
        message: str,
    ) -> bool:
        if not email_allowed(recipient, PREF_TEAM_UPDATES):
            logger.info("Team update email skipped for %s due to user preferences", recipient.email)
            return False
        content = render_team_update(
            team_name=team_name,
            hackathon_title=hackathon_title,
            update_type=update_type,
            message=message,
            dashboard_url=f"{self.base_url}/teams/{team_id}",
        )
        await self.send(recipient.email, content, kind="team_update")
        return True
