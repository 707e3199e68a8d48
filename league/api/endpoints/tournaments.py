from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from league.services import round_service, tournament_service
from league.models.user import User
from league.schemas import tournament_schemas
from league.api.dependencies import get_current_user, get_db, require_admin

router = APIRouter()


@router.post("", response_model=tournament_schemas.TournamentRead, status_code=status.HTTP_201_CREATED)
async def create_tournament_endpoint(
    tournament_in: tournament_schemas.TournamentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return tournament_service.create_tournament(db=db, tournament=tournament_in, creator_id=current_user.id)


@router.get("", response_model=List[tournament_schemas.TournamentRead])
async def list_tournaments_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return tournament_service.list_tournaments(db=db, creator_id=current_user.id)


@router.get("/{tournament_id}/rounds", response_model=List[tournament_schemas.RoundRead])
async def list_rounds_endpoint(
    tournament_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tournament_service.get_tournament(db, tournament_id)
    return round_service.list_rounds(db, tournament_id)


@router.post("/{tournament_id}/rounds", response_model=tournament_schemas.RoundRead, status_code=status.HTTP_201_CREATED)
async def create_round_endpoint(
    tournament_id: str,
    round_in: tournament_schemas.RoundCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    tournament_service.get_owned_tournament(db, tournament_id, current_user.id)
    return round_service.create_round(db, tournament_id, title=round_in.title)


@router.post("/{tournament_id}/rounds/{round_id}/close", response_model=tournament_schemas.RoundRead)
async def close_round_endpoint(
    tournament_id: str,
    round_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    tournament_service.get_owned_tournament(db, tournament_id, current_user.id)
    return round_service.close_round(db, tournament_id, round_id)


@router.post("/{tournament_id}/rounds/{round_id}/reopen", response_model=tournament_schemas.RoundRead)
async def reopen_round_endpoint(
    tournament_id: str,
    round_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    tournament_service.get_owned_tournament(db, tournament_id, current_user.id)
    return round_service.reopen_round(db, tournament_id, round_id)
