"""
ORM models - SQLAlchemy declarative schema for HackMap.

List-valued fields (skills, prizes, tags, tech stack) are JSON columns holding
List[str]. All timestamps are naive UTC.
"""

import enum
import uuid
from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from hackmap.utils import as_list_str, isoformat, utcnow

Base = declarative_base()


def generate_id() -> str:
    return uuid.uuid4().hex


class TeamRole(str, enum.Enum):
    LEADER = "LEADER"
    MEMBER = "MEMBER"


class NotificationType(str, enum.Enum):
    TEAM_INVITE = "TEAM_INVITE"
    JOIN_REQUEST = "JOIN_REQUEST"
    DEADLINE_REMINDER = "DEADLINE_REMINDER"
    TEAM_UPDATE = "TEAM_UPDATE"
    PROJECT_COMMENT = "PROJECT_COMMENT"
    PROJECT_ENDORSEMENT = "PROJECT_ENDORSEMENT"


DEFAULT_NOTIFICATION_PREFERENCES: Dict[str, bool] = {
    "teamInvites": True,
    "joinRequests": True,
    "deadlineReminders": True,
    "teamUpdates": True,
}


# ============ Users ============

class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=True)
    image = Column(String(512), nullable=True)
    bio = Column(Text, nullable=True)
    skills = Column(JSON, default=list)  # List[str]
    email_notifications = Column(Boolean, default=True, nullable=False)
    notification_preferences = Column(JSON, default=lambda: dict(DEFAULT_NOTIFICATION_PREFERENCES))
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    memberships = relationship("TeamMember", back_populates="user", cascade="all, delete-orphan")
    registrations = relationship("HackathonRegistration", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="Notification.user_id",
    )

    @property
    def display_name(self) -> str:
        return self.name or self.email

    def preferences(self) -> Dict[str, bool]:
        prefs = dict(DEFAULT_NOTIFICATION_PREFERENCES)
        if isinstance(self.notification_preferences, dict):
            prefs.update({k: bool(v) for k, v in self.notification_preferences.items() if k in prefs})
        return prefs

    def summary(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "image": self.image}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "image": self.image,
            "bio": self.bio,
            "skills": as_list_str(self.skills),
            "createdAt": isoformat(self.created_at),
        }


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(128), unique=True, nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User")


# ============ Hackathons ============

class Hackathon(Base):
    __tablename__ = "hackathons"

    id = Column(String(32), primary_key=True, default=generate_id)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    theme = Column(String(64), nullable=False, default="general", index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    registration_deadline = Column(DateTime, nullable=False, index=True)
    max_team_size = Column(Integer, nullable=False, default=4)
    prizes = Column(JSON, default=list)  # List[str]
    tags = Column(JSON, default=list)  # List[str]
    organizer_id = Column(String(32), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    organizer = relationship("User")
    registrations = relationship("HackathonRegistration", back_populates="hackathon", cascade="all, delete-orphan")
    teams = relationship("Team", back_populates="hackathon", cascade="all, delete-orphan")

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "maxTeamSize": self.max_team_size,
            "registrationDeadline": isoformat(self.registration_deadline),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "theme": self.theme,
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "registrationDeadline": isoformat(self.registration_deadline),
            "maxTeamSize": self.max_team_size,
            "prizes": as_list_str(self.prizes),
            "tags": as_list_str(self.tags),
            "organizerId": self.organizer_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


class HackathonRegistration(Base):
    __tablename__ = "hackathon_registrations"
    __table_args__ = (UniqueConstraint("user_id", "hackathon_id", name="uq_registration_user_hackathon"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    hackathon_id = Column(String(32), ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False, index=True)
    registered_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="registrations")
    hackathon = relationship("Hackathon", back_populates="registrations")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "hackathonId": self.hackathon_id,
            "registeredAt": isoformat(self.registered_at),
        }


# ============ Teams ============

class Team(Base):
    __tablename__ = "teams"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    hackathon_id = Column(String(32), ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False, index=True)
    leader_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    invite_code = Column(String(16), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    hackathon = relationship("Hackathon", back_populates="teams")
    leader = relationship("User")
    members = relationship(
        "TeamMember",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamMember.joined_at",
    )
    projects = relationship("Project", back_populates="team", cascade="all, delete-orphan")

    def has_member(self, user_id: str) -> bool:
        return any(m.user_id == user_id for m in self.members)

    def is_full(self) -> bool:
        return len(self.members) >= self.hackathon.max_team_size

    def to_dict(self, include_members: bool = True) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "hackathonId": self.hackathon_id,
            "leaderId": self.leader_id,
            "inviteCode": self.invite_code,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
            "hackathon": self.hackathon.summary() if self.hackathon else None,
            "_count": {"members": len(self.members)},
        }
        if include_members:
            data["members"] = [m.to_dict() for m in self.members]
        return data


class TeamMember(Base):
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_member"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(String(32), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(TeamRole), nullable=False, default=TeamRole.MEMBER)
    joined_at = Column(DateTime, default=utcnow)

    team = relationship("Team", back_populates="members")
    user = relationship("User", back_populates="memberships")

    def to_dict(self) -> Dict[str, Any]:
        user = self.user
        return {
            "id": self.id,
            "teamId": self.team_id,
            "userId": self.user_id,
            "role": self.role.value if self.role else None,
            "joinedAt": isoformat(self.joined_at),
            "user": {
                "id": user.id,
                "name": user.name,
                "image": user.image,
                "skills": as_list_str(user.skills),
            } if user else None,
        }


# ============ Projects ============

class Project(Base):
    __tablename__ = "projects"

    id = Column(String(32), primary_key=True, default=generate_id)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    tech_stack = Column(JSON, default=list)  # List[str]
    github_url = Column(String(512), nullable=True)
    demo_url = Column(String(512), nullable=True)
    team_id = Column(String(32), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    team = relationship("Team", back_populates="projects")
    comments = relationship(
        "ProjectComment",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectComment.created_at",
    )
    endorsements = relationship("ProjectEndorsement", back_populates="project", cascade="all, delete-orphan")

    def to_dict(self) -> Dict[str, Any]:
        team = self.team
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "techStack": as_list_str(self.tech_stack),
            "githubUrl": self.github_url,
            "demoUrl": self.demo_url,
            "teamId": self.team_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
            "team": {
                "id": team.id,
                "name": team.name,
                "hackathon": {"id": team.hackathon.id, "title": team.hackathon.title},
                "members": [
                    {"role": m.role.value, "user": m.user.summary()} for m in team.members
                ],
            } if team else None,
            "_count": {
                "comments": len(self.comments),
                "endorsements": len(self.endorsements),
            },
        }


class ProjectComment(Base):
    __tablename__ = "project_comments"

    id = Column(String(32), primary_key=True, default=generate_id)
    content = Column(Text, nullable=False)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User")
    project = relationship("Project", back_populates="comments")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "userId": self.user_id,
            "projectId": self.project_id,
            "createdAt": isoformat(self.created_at),
            "user": self.user.summary() if self.user else None,
        }


class ProjectEndorsement(Base):
    __tablename__ = "project_endorsements"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_endorsement_project_user"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User")
    project = relationship("Project", back_populates="endorsements")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "userId": self.user_id,
            "createdAt": isoformat(self.created_at),
            "user": self.user.summary() if self.user else None,
        }


# ============ Notifications ============

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(NotificationType), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    # Who triggered it and which team it concerns (used to detect duplicate join requests)
    actor_id = Column(String(32), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    team_id = Column(String(32), ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)

    user = relationship("User", back_populates="notifications", foreign_keys=[user_id])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "type": self.type.value if self.type else None,
            "title": self.title,
            "message": self.message,
            "read": bool(self.read),
            "actorId": self.actor_id,
            "teamId": self.team_id,
            "createdAt": isoformat(self.created_at),
        }
