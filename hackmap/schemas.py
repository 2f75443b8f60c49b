from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from hackmap.data_client.models import NotificationType
from hackmap.utils import clean_labels, to_naive_utc


class CamelModel(BaseModel):
    """Wire models use camelCase; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─────────────────────────────────────────────────────────────
# Auth
# ─────────────────────────────────────────────────────────────

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=256)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


# ─────────────────────────────────────────────────────────────
# Profile
# ─────────────────────────────────────────────────────────────

class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = None

    @field_validator("skills")
    @classmethod
    def _clean_skills(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        # Stored trimmed so "React " still matches "React" in matchmaking
        return clean_labels(value) if value is not None else None


class NotificationPreferences(CamelModel):
    team_invites: bool = True
    join_requests: bool = True
    deadline_reminders: bool = True
    team_updates: bool = True


class NotificationSettingsRequest(CamelModel):
    email_notifications: Optional[bool] = None
    preferences: Optional[NotificationPreferences] = None


# ─────────────────────────────────────────────────────────────
# Hackathons
# ─────────────────────────────────────────────────────────────

class HackathonCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    theme: str = "general"
    start_date: datetime
    end_date: datetime
    registration_deadline: datetime
    max_team_size: int = Field(4, ge=1, le=50)
    prizes: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @field_validator("start_date", "end_date", "registration_deadline")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def _check_dates(self) -> "HackathonCreateRequest":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        if self.registration_deadline > self.end_date:
            raise ValueError("registrationDeadline must not be after endDate")
        return self


# ─────────────────────────────────────────────────────────────
# Teams
# ─────────────────────────────────────────────────────────────

class TeamCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    hackathon_id: str


class JoinTeamRequest(CamelModel):
    invite_code: Optional[str] = None


class TeamInviteRequest(CamelModel):
    email: Optional[EmailStr] = None


class MatchmakingResponse(CamelModel):
    """
    Response of /api/teams/matchmaking.

    `teams` entries are the serialized team records with matchScore,
    commonSkills, complementarySkills and teamSkills merged in.
    """
    message: str
    user_skills: Optional[List[str]] = None
    teams: List[Dict[str, Any]]


# ─────────────────────────────────────────────────────────────
# Projects
# ─────────────────────────────────────────────────────────────

class ProjectCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    team_id: str
    tech_stack: List[str] = Field(default_factory=list)
    github_url: Optional[str] = None
    demo_url: Optional[str] = None


class CommentCreateRequest(CamelModel):
    content: Optional[str] = None


# ─────────────────────────────────────────────────────────────
# Notifications
# ─────────────────────────────────────────────────────────────

class NotificationCreateRequest(CamelModel):
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)


# ─────────────────────────────────────────────────────────────
# Cron
# ─────────────────────────────────────────────────────────────

class CronTriggerRequest(CamelModel):
    authorization: Optional[str] = None
