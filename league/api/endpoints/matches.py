from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from league.services import match_service, result_service
from league.services.match_store import MatchStore
from league.models.team import Team
from league.models.user import User
from league.schemas import match_schemas
from league.api.dependencies import get_current_team, get_db, get_match_store, require_admin

team_router = APIRouter()
router = APIRouter()


# --- /team/matches ---

@team_router.get("", response_model=List[match_schemas.MatchRead])
async def list_own_matches_endpoint(
    store: MatchStore = Depends(get_match_store),
    current_team: Team = Depends(get_current_team),
):
    return match_service.list_team_matches(store, current_team.id)


@team_router.post("", response_model=match_schemas.MatchRead, status_code=status.HTTP_201_CREATED)
async def create_own_match_endpoint(
    match_in: match_schemas.TeamMatchCreate,
    db: Session = Depends(get_db),
    store: MatchStore = Depends(get_match_store),
    current_team: Team = Depends(get_current_team),
):
    return match_service.create_match_as_team(db, store, current_team.id, match_in)


@team_router.put("/{match_id}", response_model=match_schemas.MatchRead)
async def update_own_match_endpoint(
    match_id: str,
    match_in: match_schemas.TeamMatchCreate,
    db: Session = Depends(get_db),
    store: MatchStore = Depends(get_match_store),
    current_team: Team = Depends(get_current_team),
):
    return match_service.team_update_match(db, store, match_id, current_team.id, match_in)


@team_router.post("/{match_id}/result", response_model=match_schemas.MatchRead)
async def submit_result_endpoint(
    match_id: str,
    result_in: match_schemas.ResultActionRequest,
    store: MatchStore = Depends(get_match_store),
    current_team: Team = Depends(get_current_team),
):
    payload = result_in.payload.model_dump(exclude_unset=True) if result_in.payload else None
    return result_service.apply_action(store, match_id, current_team.id, result_in.action, payload)


@team_router.delete("/{match_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_own_match_endpoint(
    match_id: str,
    store: MatchStore = Depends(get_match_store),
    current_team: Team = Depends(get_current_team),
):
    match_service.team_delete_match(store, match_id, current_team.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- /matches (administrators) ---

@router.get("", response_model=List[match_schemas.MatchRead])
async def list_matches_endpoint(
    tournament_id: Optional[str] = None,
    round_id: Optional[str] = None,
    store: MatchStore = Depends(get_match_store),
    current_user: User = Depends(require_admin),
):
    return match_service.list_matches(store, tournament_id, round_id)


@router.get("/{match_id}", response_model=match_schemas.MatchRead)
async def get_match_endpoint(
    match_id: str,
    store: MatchStore = Depends(get_match_store),
    current_user: User = Depends(require_admin),
):
    return match_service.get_match(store, match_id)


@router.post("", response_model=match_schemas.MatchRead, status_code=status.HTTP_201_CREATED)
async def create_match_endpoint(
    match_in: match_schemas.MatchCreate,
    db: Session = Depends(get_db),
    store: MatchStore = Depends(get_match_store),
    current_user: User = Depends(require_admin),
):
    return match_service.create_match_as_admin(db, store, match_in)


@router.put("/{match_id}", response_model=match_schemas.MatchRead)
async def update_match_endpoint(
    match_id: str,
    match_in: match_schemas.AdminMatchUpdate,
    store: MatchStore = Depends(get_match_store),
    current_user: User = Depends(require_admin),
):
    return result_service.admin_update(store, match_id, match_in.model_dump(exclude_unset=True))


@router.delete("/{match_id}", response_model=match_schemas.MatchRead)
async def delete_match_endpoint(
    match_id: str,
    store: MatchStore = Depends(get_match_store),
    current_user: User = Depends(require_admin),
):
    return match_service.admin_delete_match(store, match_id)
