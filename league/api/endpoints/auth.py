from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session

from league.services import auth_service, team_service
from league.models.team import Team
from league.models.user import User
from league.schemas import auth_schemas, team_schemas, user_schemas
from league.api.dependencies import get_current_team, get_db, require_admin

router = APIRouter()


@router.post("/login", response_model=auth_schemas.Token)
async def login_endpoint(
    credentials: auth_schemas.LoginRequest,
    db: Session = Depends(get_db),
):
    user = auth_service.authenticate(db, credentials.email, credentials.password)
    return {"access_token": auth_service.issue_token(user), "token_type": "bearer"}


@router.post("/admin/users", response_model=user_schemas.UserRead, status_code=status.HTTP_201_CREATED)
async def create_admin_user_endpoint(
    user_in: user_schemas.AdminUserCreate,
    db: Session = Depends(get_db),
    x_admin_signup_key: Optional[str] = Header(None),
):
    return auth_service.create_admin_user(db, user_in, signup_key=x_admin_signup_key)


@router.post("/admin/users/{user_id}/reset-password", response_model=user_schemas.UserRead)
async def reset_password_endpoint(
    user_id: str,
    reset_in: auth_schemas.PasswordResetRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return auth_service.reset_password(db, user_id, reset_in.new_password)


@router.get("/team/me", response_model=team_schemas.TeamRead)
async def read_own_team_endpoint(current_team: Team = Depends(get_current_team)):
    return current_team


@router.get("/team/current-user", response_model=team_schemas.TeamSummary)
async def read_team_summary_endpoint(
    db: Session = Depends(get_db),
    current_team: Team = Depends(get_current_team),
):
    return team_service.team_summary(db, current_team)
