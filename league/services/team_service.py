"""
Teams and their login identities.

Registering a team writes two records: the auth identity and the team row.
There is no transaction spanning both concerns, so a failed team write is
followed by deleting the identity again.
"""
import logging
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from league.core import security
from league.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from league.models.match import Match
from league.models.participant import Participant
from league.models.team import Team
from league.models.user import User, ROLE_TEAM
from league.schemas import team_schemas
from league.services import auth_service, tournament_service
from league.services.tournament_service import create_slug_from

logger = logging.getLogger(__name__)


def team_email(username: str, owner_id: str) -> str:
    return f"{username}@{owner_id}.teams.local"


def _username_from(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Team name is required")
    username = create_slug_from(name)
    if not username:
        raise ValidationError("Team name must contain letters or digits")
    return username


def _username_taken(db: Session, username: str, exclude_team_id: Optional[str] = None) -> bool:
    stmt = select(Team.id).where(Team.username == username)
    if exclude_team_id:
        stmt = stmt.where(Team.id != exclude_team_id)
    return db.scalars(stmt).first() is not None


def register_team(db: Session, team_in: team_schemas.TeamRegister, admin_id: str) -> team_schemas.TeamRegistered:
    username = _username_from(team_in.name)
    if not team_in.tournament_id:
        raise ValidationError("tournament_id is required")
    tournament = tournament_service.get_owned_tournament(db, team_in.tournament_id, admin_id)

    if _username_taken(db, username):
        raise ConflictError("This team name is already in use")

    password = security.generate_one_time_password()
    email = team_email(username, admin_id)
    identity = auth_service.create_identity(db, email, password, ROLE_TEAM, display_name=team_in.name.strip())

    team = Team(
        name=team_in.name.strip(),
        username=username,
        auth_user_id=identity.id,
        created_by=admin_id,
        tournament_id=tournament.id,
    )
    db.add(team)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        auth_service.delete_identity(db, identity.id)
        logger.warning("Team insert failed; auth identity rolled back", extra={"username": username})
        raise ConflictError("This team name is already in use")
    db.refresh(team)

    logger.info("Team registered", extra={"team_id": team.id, "tournament_id": tournament.id})
    return team_schemas.TeamRegistered(
        **team_schemas.TeamRead.model_validate(team).model_dump(),
        email=email,
        generated_password=password,
    )


def list_teams(db: Session, admin_id: str, tournament_id: Optional[str]) -> List[Team]:
    if not tournament_id:
        raise ValidationError("tournament_id is required")
    tournament_service.get_owned_tournament(db, tournament_id, admin_id)
    stmt = (
        select(Team)
        .where(Team.created_by == admin_id, Team.tournament_id == tournament_id)
        .order_by(Team.name.asc())
    )
    return list(db.scalars(stmt).all())


def get_team(db: Session, team_id: str) -> Team:
    team = db.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


def get_owned_team(db: Session, team_id: str, admin_id: str) -> Team:
    team = get_team(db, team_id)
    if team.created_by != admin_id:
        raise ForbiddenError("Not authorized to manage this team")
    return team


def get_team_for_user(db: Session, user: User) -> Team:
    team = db.scalars(select(Team).where(Team.auth_user_id == user.id)).first()
    if team is None:
        logger.warning("No team linked to authenticated user", extra={"user_id": user.id})
        raise NotFoundError("Team not found")
    return team


def update_team(db: Session, team_id: str, team_in: team_schemas.TeamUpdate, admin_id: str) -> Team:
    username = _username_from(team_in.name)
    team = get_owned_team(db, team_id, admin_id)

    if username != team.username:
        if _username_taken(db, username, exclude_team_id=team.id):
            raise ConflictError("This team name is already in use")
        if team.auth_user is not None:
            team.auth_user.email = team_email(username, team.created_by)

    team.name = team_in.name.strip()
    team.username = username
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("This team name is already in use")
    db.refresh(team)
    return team


def delete_team(db: Session, team_id: str, admin_id: str) -> None:
    team = get_owned_team(db, team_id, admin_id)
    referenced = db.scalars(
        select(Match.id)
        .where(or_(
            Match.team_id == team.id,
            Match.opponent_team_id == team.id,
            Match.input_allowed_team_id == team.id,
            Match.locked_by == team.id,
        ))
        .limit(1)
    ).first()
    if referenced is not None:
        raise ConflictError("Team still has matches; delete or reassign them first")

    auth_user_id = team.auth_user_id
    db.delete(team)
    db.commit()
    if auth_user_id:
        auth_service.delete_identity(db, auth_user_id)
    logger.info("Team deleted", extra={"team_id": team_id})


def team_summary(db: Session, team: Team) -> team_schemas.TeamSummary:
    editor = db.scalars(
        select(Participant.id).where(Participant.team_id == team.id, Participant.can_edit.is_(True)).limit(1)
    ).first()
    return team_schemas.TeamSummary(
        id=team.id,
        name=team.name,
        username=team.username,
        can_edit=editor is not None,
        tournament_id=team.tournament_id,
        created_at=team.created_at,
    )
