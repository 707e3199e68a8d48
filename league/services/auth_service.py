"""
Auth identities.

Administrators and teams both log in through a ``User`` row. Team identities
are created and removed by ``team_service`` alongside the team itself.
"""
import hmac
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from league.core import security
from league.core.config import settings
from league.core.errors import (
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from league.models.user import User, ROLE_ADMIN
from league.schemas import user_schemas

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalars(select(User).where(User.email == email.strip().lower())).first()


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if user is None or not security.verify_password(password, user.password_hash):
        logger.warning("Failed login attempt", extra={"email": email})
        raise UnauthorizedError("Invalid e-mail or password")
    return user


def issue_token(user: User) -> str:
    return security.create_access_token(
        data={"sub": user.id, "role": user.role},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def get_user_from_token(db: Session, token: str) -> User:
    token_data = security.verify_token(token)
    user = db.get(User, token_data.user_id)
    if user is None:
        raise UnauthorizedError("Could not validate credentials")
    return user


def create_identity(db: Session, email: str, password: str, role: str, display_name: Optional[str] = None) -> User:
    user = User(
        email=email.strip().lower(),
        password_hash=security.get_password_hash(password),
        role=role,
        display_name=display_name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"An account for {email} already exists")
    db.refresh(user)
    return user


def delete_identity(db: Session, user_id: str) -> None:
    user = db.get(User, user_id)
    if user is not None:
        db.delete(user)
        db.commit()


def _validate_password(password: Optional[str]) -> str:
    password = (password or "").strip()
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def create_admin_user(db: Session, user_in: user_schemas.AdminUserCreate, signup_key: Optional[str]) -> User:
    if not settings.ADMIN_SIGNUP_KEY:
        logger.error("Admin signup attempted but ADMIN_SIGNUP_KEY is not configured")
        raise ConfigurationError("Admin accounts cannot be created: ADMIN_SIGNUP_KEY is not configured")
    if not signup_key or not hmac.compare_digest(signup_key, settings.ADMIN_SIGNUP_KEY):
        raise ForbiddenError("Invalid admin signup key")

    password = _validate_password(user_in.password)
    user = create_identity(db, user_in.email, password, ROLE_ADMIN, user_in.display_name)
    logger.info("Admin user created", extra={"user_id": user.id})
    return user


def reset_password(db: Session, user_id: str, new_password: Optional[str]) -> User:
    password = _validate_password(new_password)
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    user.password_hash = security.get_password_hash(password)
    db.commit()
    db.refresh(user)
    logger.info("Password reset by administrator", extra={"user_id": user_id})
    return user
