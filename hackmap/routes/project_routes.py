# hackmap/routes/project_routes.py
"""Project showcase: submissions, comments and endorsements."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hackmap.data_client.models import Project, ProjectComment, ProjectEndorsement, User
from hackmap.data_client.queries import get_project, get_team, list_projects
from hackmap.dependencies import get_current_user, get_session
from hackmap.errors import Conflict, Forbidden, NotFound, ValidationFailed
from hackmap.notifications import (
    create_project_comment_notification,
    create_project_endorsement_notification,
)
from hackmap.schemas import CommentCreateRequest, ProjectCreateRequest
from hackmap.utils import clean_labels

logger = logging.getLogger("hackmap.projects")

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _get_project_or_404(session: Session, project_id: str) -> Project:
    project = get_project(session, project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


@router.get("")
def get_projects(session: Session = Depends(get_session)):
    return [p.to_dict() for p in list_projects(session)]


@router.post("", status_code=201)
def create_project(
    req: ProjectCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    team = get_team(session, req.team_id)
    if team is None:
        raise NotFound("Team not found")
    if not team.has_member(user.id):
        raise Forbidden("Only team members can submit projects for this team")

    project = Project(
        title=req.title.strip(),
        description=req.description,
        team_id=team.id,
        tech_stack=clean_labels(req.tech_stack),
        github_url=req.github_url,
        demo_url=req.demo_url,
    )
    session.add(project)
    session.commit()
    logger.info("Project %s submitted by team %s", project.id, team.id)

    session.expire_all()
    return _get_project_or_404(session, project.id).to_dict()


@router.get("/{project_id}")
def get_project_detail(project_id: str, session: Session = Depends(get_session)):
    project = _get_project_or_404(session, project_id)
    data = project.to_dict()
    data["comments"] = [c.to_dict() for c in project.comments]
    data["endorsements"] = [e.to_dict() for e in project.endorsements]
    return data


# ─────────────────────────────────────────────────────────────
# Comments
# ─────────────────────────────────────────────────────────────
@router.post("/{project_id}/comments", status_code=201)
def add_comment(
    project_id: str,
    req: CommentCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    content = (req.content or "").strip()
    if not content:
        raise ValidationFailed("Comment content is required")

    project = _get_project_or_404(session, project_id)
    comment = ProjectComment(content=content, user_id=user.id, project_id=project.id)
    session.add(comment)

    leader_id = project.team.leader_id
    if leader_id != user.id:
        create_project_comment_notification(
            session, leader_id, user.display_name, project.title, content, actor_id=user.id
        )
    session.commit()
    return comment.to_dict()


# ─────────────────────────────────────────────────────────────
# Endorsements
# ─────────────────────────────────────────────────────────────
@router.post("/{project_id}/endorsements", status_code=201)
def endorse_project(
    project_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    project = _get_project_or_404(session, project_id)
    if any(e.user_id == user.id for e in project.endorsements):
        raise Conflict("Already endorsed")

    endorsement = ProjectEndorsement(project_id=project.id, user_id=user.id)
    leader_id = project.team.leader_id
    try:
        session.add(endorsement)
        if leader_id != user.id:
            create_project_endorsement_notification(
                session, leader_id, user.display_name, project.title, actor_id=user.id
            )
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("Already endorsed")
    return endorsement.to_dict()


@router.delete("/{project_id}/endorsements")
def remove_endorsement(
    project_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    deleted = (
        session.query(ProjectEndorsement)
        .filter_by(project_id=project_id, user_id=user.id)
        .delete()
    )
    if not deleted:
        raise NotFound("Endorsement not found")
    session.commit()
    return {"success": True}
