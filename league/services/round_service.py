"""
Round lifecycle.

Rounds of a tournament are numbered 1, 2, 3, ... and progress linearly: the
next round can only be created once the latest one is closed, and only the
latest round can be reopened after a close.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from league.core.errors import (
    ConflictError,
    NotFoundError,
    RoundAlreadyClosed,
    RoundClosedForMatches,
    RoundCreationBlocked,
    RoundNotClosed,
    RoundNotLatest,
)
from league.models.round import Round, ROUND_CLOSED, ROUND_OPEN

logger = logging.getLogger(__name__)


def list_rounds(db: Session, tournament_id: str) -> List[Round]:
    stmt = select(Round).where(Round.tournament_id == tournament_id).order_by(Round.number.asc())
    return list(db.scalars(stmt).all())


def get_latest_round(db: Session, tournament_id: str) -> Optional[Round]:
    stmt = (
        select(Round)
        .where(Round.tournament_id == tournament_id)
        .order_by(Round.number.desc())
        .limit(1)
    )
    return db.scalars(stmt).first()


def get_round(db: Session, tournament_id: str, round_id: str) -> Round:
    stmt = select(Round).where(Round.id == round_id, Round.tournament_id == tournament_id)
    round_ = db.scalars(stmt).first()
    if round_ is None:
        raise NotFoundError("Round not found")
    return round_


def create_round(db: Session, tournament_id: str, title: Optional[str] = None) -> Round:
    latest = get_latest_round(db, tournament_id)
    if latest is not None and latest.status != ROUND_CLOSED:
        raise RoundCreationBlocked()

    title = title.strip() if title else None
    round_ = Round(
        tournament_id=tournament_id,
        number=latest.number + 1 if latest else 1,
        title=title or None,
        status=ROUND_OPEN,
    )
    db.add(round_)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent round creation rejected", extra={"tournament_id": tournament_id, "number": round_.number})
        raise ConflictError("Another round was created at the same time; reload and try again")
    db.refresh(round_)
    logger.info("Round created", extra={"tournament_id": tournament_id, "round_id": round_.id, "number": round_.number})
    return round_


def close_round(db: Session, tournament_id: str, round_id: str) -> Round:
    round_ = get_round(db, tournament_id, round_id)
    if round_.status == ROUND_CLOSED:
        raise RoundAlreadyClosed()
    round_.status = ROUND_CLOSED
    round_.closed_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(round_)
    logger.info("Round closed", extra={"tournament_id": tournament_id, "round_id": round_id})
    return round_


def reopen_round(db: Session, tournament_id: str, round_id: str) -> Round:
    round_ = get_round(db, tournament_id, round_id)
    if round_.status != ROUND_CLOSED:
        raise RoundNotClosed()
    latest = get_latest_round(db, tournament_id)
    if latest is None or latest.id != round_.id:
        raise RoundNotLatest()
    round_.status = ROUND_OPEN
    round_.closed_at = None
    db.commit()
    db.refresh(round_)
    logger.info("Round reopened", extra={"tournament_id": tournament_id, "round_id": round_id})
    return round_


def ensure_round_accepts_matches(db: Session, tournament_id: str, round_id: str) -> Round:
    round_ = get_round(db, tournament_id, round_id)
    if round_.status != ROUND_OPEN:
        raise RoundClosedForMatches()
    return round_
