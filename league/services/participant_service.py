import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from league.core.errors import ForbiddenError, NotFoundError, ValidationError
from league.models.participant import Participant
from league.models.team import Team
from league.schemas import participant_schemas
from league.services import team_service

logger = logging.getLogger(__name__)


def list_participants(db: Session, team_id: str) -> List[Participant]:
    stmt = select(Participant).where(Participant.team_id == team_id).order_by(Participant.name.asc())
    return list(db.scalars(stmt).all())


def _get_participant(db: Session, participant_id: str) -> Participant:
    participant = db.get(Participant, participant_id)
    if participant is None:
        raise NotFoundError("Participant not found")
    return participant


def _required_name(name) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Participant name is required")
    return name


def create_participant(db: Session, team: Team, participant_in: participant_schemas.ParticipantCreate, created_by: str) -> Participant:
    participant = Participant(
        team_id=team.id,
        name=_required_name(participant_in.name),
        can_edit=participant_in.can_edit,
        created_by=created_by,
    )
    db.add(participant)
    db.commit()
    db.refresh(participant)
    return participant


# --- Team self-service ---

def get_team_participant(db: Session, team: Team, participant_id: str) -> Participant:
    participant = _get_participant(db, participant_id)
    if participant.team_id != team.id:
        raise ForbiddenError("Not authorized to manage this participant")
    return participant


def update_team_participant(db: Session, team: Team, participant_id: str, participant_in: participant_schemas.ParticipantUpdate) -> Participant:
    participant = get_team_participant(db, team, participant_id)
    update_data = participant_in.model_dump(exclude_unset=True, exclude={"team_id"})
    name = (update_data.get("name") or "").strip()
    changed = False
    if name:
        participant.name = name
        changed = True
    if update_data.get("can_edit") is not None:
        participant.can_edit = update_data["can_edit"]
        changed = True
    if not changed:
        raise ValidationError("Nothing to update")
    db.commit()
    db.refresh(participant)
    return participant


def delete_team_participant(db: Session, team: Team, participant_id: str) -> None:
    participant = get_team_participant(db, team, participant_id)
    db.delete(participant)
    db.commit()


# --- Administrator ---

def get_admin_participant(db: Session, participant_id: str, admin_id: str) -> Participant:
    participant = _get_participant(db, participant_id)
    team_service.get_owned_team(db, participant.team_id, admin_id)
    return participant


def update_admin_participant(db: Session, participant_id: str, participant_in: participant_schemas.ParticipantUpdate, admin_id: str) -> Participant:
    participant = _get_participant(db, participant_id)
    target_team = team_service.get_owned_team(db, participant_in.team_id or participant.team_id, admin_id)
    if target_team.id != participant.team_id:
        # Moving away from a team also requires owning the current one
        team_service.get_owned_team(db, participant.team_id, admin_id)

    participant.name = _required_name(participant_in.name)
    if participant_in.can_edit is not None:
        participant.can_edit = participant_in.can_edit
    participant.team_id = target_team.id
    db.commit()
    db.refresh(participant)
    logger.info("Participant updated by administrator", extra={"participant_id": participant_id})
    return participant


def delete_admin_participant(db: Session, participant_id: str, admin_id: str) -> None:
    participant = get_admin_participant(db, participant_id, admin_id)
    db.delete(participant)
    db.commit()
