import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from league.core.database import SessionLocal
from league.core.errors import ForbiddenError
from league.core.security import oauth2_scheme
from league.models.team import Team
from league.models.user import User, ROLE_ADMIN, ROLE_TEAM
from league.services import auth_service, team_service
from league.services.match_store import MatchStore, SqlMatchStore

logger = logging.getLogger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_match_store(db: Session = Depends(get_db)) -> MatchStore:
    return SqlMatchStore(db)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    return auth_service.get_user_from_token(db, token)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != ROLE_ADMIN:
        logger.warning("Administrator route refused", extra={"user_id": current_user.id, "role": current_user.role})
        raise ForbiddenError("Administrator privileges required")
    return current_user


def get_current_team(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Team:
    if current_user.role != ROLE_TEAM:
        raise ForbiddenError("Team account required")
    return team_service.get_team_for_user(db, current_user)
