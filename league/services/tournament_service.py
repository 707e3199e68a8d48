import logging
import re
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from league.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from league.models.tournament import Tournament
from league.schemas import tournament_schemas

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def create_slug_from(value: str) -> str:
    """Lowercase, collapse every run of non-alphanumerics to one hyphen, trim hyphens."""
    slug = re.sub(r"[^a-z0-9]+", "-", str(value).strip().lower())
    return slug.strip("-")


def create_tournament(db: Session, tournament: tournament_schemas.TournamentCreate, creator_id: str) -> Tournament:
    name = (tournament.name or "").strip()
    if not name:
        raise ValidationError("Tournament name is required")

    slug = create_slug_from(tournament.slug if tournament.slug else name)
    if not slug or not SLUG_PATTERN.match(slug):
        raise ValidationError("Slug may only contain lowercase letters, digits and hyphens")

    description = tournament.description.strip() if tournament.description else None
    db_tournament = Tournament(
        name=name,
        slug=slug,
        description=description or None,
        created_by=creator_id,
    )
    db.add(db_tournament)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Slug '{slug}' is already in use")
    db.refresh(db_tournament)
    logger.info("Tournament created", extra={"tournament_id": db_tournament.id, "slug": slug})
    return db_tournament


def get_tournament(db: Session, tournament_id: str) -> Tournament:
    tournament = db.get(Tournament, tournament_id)
    if tournament is None:
        raise NotFoundError("Tournament not found")
    return tournament


def get_owned_tournament(db: Session, tournament_id: str, admin_id: str) -> Tournament:
    tournament = get_tournament(db, tournament_id)
    if tournament.created_by != admin_id:
        raise ForbiddenError("Not authorized to manage this tournament")
    return tournament


def list_tournaments(db: Session, creator_id: str) -> List[Tournament]:
    stmt = (
        select(Tournament)
        .where(Tournament.created_by == creator_id)
        .order_by(Tournament.created_at.desc())
    )
    return list(db.scalars(stmt).all())
