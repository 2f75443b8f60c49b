# hackmap/email_client/templates.py
"""
Email templates (Jinja2, HTML).

Each render_* function returns an EmailMessageContent(subject, html). The HTML
lives under hackmap/email_client/html/ and extends base.html.
"""

from __future__ import annotations

from dataclasses import dataclass

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

_env = Environment(
    loader=PackageLoader("hackmap.email_client", "html"),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
)


@dataclass(frozen=True)
class EmailMessageContent:
    subject: str
    html: str


def _plural_days(days: int) -> str:
    return f"{days} day{'' if days == 1 else 's'}"


_env.filters["days"] = _plural_days


def render_team_invite(
    team_name: str,
    hackathon_title: str,
    invite_code: str,
    invite_url: str,
    inviter_name: str,
) -> EmailMessageContent:
    html = _env.get_template("team_invite.html").render(
        team_name=team_name,
        hackathon_title=hackathon_title,
        invite_code=invite_code,
        invite_url=invite_url,
        inviter_name=inviter_name,
    )
    return EmailMessageContent(
        subject=f"🚀 You're invited to join team \"{team_name}\"!",
        html=html,
    )


def render_join_request(
    team_name: str,
    hackathon_title: str,
    requester_name: str,
    requester_email: str,
    team_leader_name: str,
    dashboard_url: str,
) -> EmailMessageContent:
    html = _env.get_template("join_request.html").render(
        team_name=team_name,
        hackathon_title=hackathon_title,
        requester_name=requester_name,
        requester_email=requester_email,
        team_leader_name=team_leader_name,
        dashboard_url=dashboard_url,
    )
    return EmailMessageContent(
        subject=f"📝 New join request for team \"{team_name}\"",
        html=html,
    )


def render_deadline_reminder(
    user_name: str,
    hackathon_title: str,
    deadline_type: str,
    deadline: str,
    days_left: int,
    action_url: str,
) -> EmailMessageContent:
    html = _env.get_template("deadline_reminder.html").render(
        user_name=user_name,
        hackathon_title=hackathon_title,
        deadline_type=deadline_type,
        deadline=deadline,
        days_left=days_left,
        action_url=action_url,
    )
    return EmailMessageContent(
        subject=f"⏰ Reminder: {deadline_type} deadline approaching for {hackathon_title}",
        html=html,
    )


def render_team_update(
    team_name: str,
    hackathon_title: str,
    update_type: str,
    message: str,
    dashboard_url: str,
) -> EmailMessageContent:
    html = _env.get_template("team_update.html").render(
        team_name=team_name,
        hackathon_title=hackathon_title,
        update_type=update_type,
        message=message,
        dashboard_url=dashboard_url,
    )
    return EmailMessageContent(
        subject=f"🔔 Team update: {update_type} - {team_name}",
        html=html,
    )
