from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from league.services import team_service
from league.models.user import User
from league.schemas import team_schemas
from league.api.dependencies import get_db, require_admin

router = APIRouter()


@router.post("/register", response_model=team_schemas.TeamRegistered, status_code=status.HTTP_201_CREATED)
async def register_team_endpoint(
    team_in: team_schemas.TeamRegister,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return team_service.register_team(db, team_in, admin_id=current_user.id)


@router.get("", response_model=List[team_schemas.TeamRead])
async def list_teams_endpoint(
    tournament_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return team_service.list_teams(db, admin_id=current_user.id, tournament_id=tournament_id)


@router.get("/{team_id}", response_model=team_schemas.TeamRead)
async def get_team_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return team_service.get_owned_team(db, team_id, admin_id=current_user.id)


@router.put("/{team_id}", response_model=team_schemas.TeamRead)
async def update_team_endpoint(
    team_id: str,
    team_in: team_schemas.TeamUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return team_service.update_team(db, team_id, team_in, admin_id=current_user.id)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_team_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    team_service.delete_team(db, team_id, admin_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
