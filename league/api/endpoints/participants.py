from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from league.services import participant_service, team_service
from league.models.team import Team
from league.models.user import User
from league.schemas import participant_schemas
from league.api.dependencies import get_current_team, get_db, require_admin

team_router = APIRouter()
admin_router = APIRouter()


# --- /team/participants ---

@team_router.get("", response_model=List[participant_schemas.ParticipantRead])
async def list_own_participants_endpoint(
    db: Session = Depends(get_db),
    current_team: Team = Depends(get_current_team),
):
    return participant_service.list_participants(db, current_team.id)


@team_router.post("", response_model=participant_schemas.ParticipantRead, status_code=status.HTTP_201_CREATED)
async def create_own_participant_endpoint(
    participant_in: participant_schemas.ParticipantCreate,
    db: Session = Depends(get_db),
    current_team: Team = Depends(get_current_team),
):
    return participant_service.create_participant(db, current_team, participant_in, created_by=current_team.auth_user_id)


@team_router.put("/{participant_id}", response_model=participant_schemas.ParticipantRead)
async def update_own_participant_endpoint(
    participant_id: str,
    participant_in: participant_schemas.ParticipantUpdate,
    db: Session = Depends(get_db),
    current_team: Team = Depends(get_current_team),
):
    return participant_service.update_team_participant(db, current_team, participant_id, participant_in)


@team_router.delete("/{participant_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_own_participant_endpoint(
    participant_id: str,
    db: Session = Depends(get_db),
    current_team: Team = Depends(get_current_team),
):
    participant_service.delete_team_participant(db, current_team, participant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- /admin ---

@admin_router.get("/teams/{team_id}/participants", response_model=List[participant_schemas.ParticipantRead])
async def list_team_participants_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    team = team_service.get_owned_team(db, team_id, admin_id=current_user.id)
    return participant_service.list_participants(db, team.id)


@admin_router.post("/teams/{team_id}/participants", response_model=participant_schemas.ParticipantRead, status_code=status.HTTP_201_CREATED)
async def create_team_participant_endpoint(
    team_id: str,
    participant_in: participant_schemas.ParticipantCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    team = team_service.get_owned_team(db, team_id, admin_id=current_user.id)
    return participant_service.create_participant(db, team, participant_in, created_by=current_user.id)


@admin_router.put("/participants/{participant_id}", response_model=participant_schemas.ParticipantRead)
async def update_participant_endpoint(
    participant_id: str,
    participant_in: participant_schemas.ParticipantUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return participant_service.update_admin_participant(db, participant_id, participant_in, admin_id=current_user.id)


@admin_router.delete("/participants/{participant_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_participant_endpoint(
    participant_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    participant_service.delete_admin_participant(db, participant_id, admin_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
