"""
Match record store.

The result workflow only talks to this interface, so tests can hand it an
in-memory double. ``SqlMatchStore`` is the database-backed implementation and
provides the conditional write the lock relies on.
"""
import abc
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from league.models.match import Match, MatchGame, RESULT_FINALIZED

logger = logging.getLogger(__name__)

_UNSET = object()


class MatchStore(abc.ABC):

    @abc.abstractmethod
    def get(self, match_id: str) -> Optional[Match]:
        ...

    @abc.abstractmethod
    def create(self, fields: Dict[str, Any]) -> Match:
        ...

    @abc.abstractmethod
    def update(self, match_id: str, fields: Dict[str, Any]) -> Optional[Match]:
        """Write ``fields`` unconditionally. Returns None if the match does not exist."""

    @abc.abstractmethod
    def update_if_editable(self, match_id: str, fields: Dict[str, Any], team_id: str) -> Optional[Match]:
        """Write ``fields`` only if, at write time, the match is not finalized,
        is unlocked or locked by ``team_id``, and still lets ``team_id`` input.

        Returns None when the row no longer satisfies those conditions.
        """

    @abc.abstractmethod
    def delete(self, match_id: str) -> bool:
        ...

    @abc.abstractmethod
    def list_by_tournament_and_round(self, tournament_id: str, round_id: Optional[str] = None) -> List[Match]:
        ...

    @abc.abstractmethod
    def list_by_team(self, team_id: str) -> List[Match]:
        ...


def build_games(games: Optional[List[Dict[str, Any]]]) -> List[MatchGame]:
    return [MatchGame(game_number=number, **game) for number, game in enumerate(games or [], start=1)]


class SqlMatchStore(MatchStore):
    def __init__(self, db: Session):
        self.db = db

    def get(self, match_id: str) -> Optional[Match]:
        return self.db.get(Match, match_id)

    def create(self, fields: Dict[str, Any]) -> Match:
        fields = dict(fields)
        games = fields.pop("games", None)
        match = Match(**fields)
        match.games = build_games(games)
        self.db.add(match)
        self.db.commit()
        self.db.refresh(match)
        return match

    def update(self, match_id: str, fields: Dict[str, Any]) -> Optional[Match]:
        match = self.get(match_id)
        if match is None:
            return None
        fields = dict(fields)
        games = fields.pop("games", _UNSET)
        for key, value in fields.items():
            setattr(match, key, value)
        if games is not _UNSET:
            match.games = build_games(games)
        self.db.commit()
        self.db.refresh(match)
        return match

    def update_if_editable(self, match_id: str, fields: Dict[str, Any], team_id: str) -> Optional[Match]:
        fields = dict(fields)
        games = fields.pop("games", _UNSET)
        stmt = (
            update(Match)
            .where(
                Match.id == match_id,
                Match.result_status != RESULT_FINALIZED,
                or_(Match.locked_by.is_(None), Match.locked_by == team_id),
                Match.input_allowed_team_id == team_id,
            )
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        if self.db.execute(stmt).rowcount == 0:
            self.db.rollback()
            logger.info("Conditional match update matched no row", extra={"match_id": match_id, "team_id": team_id})
            return None

        match = self.db.get(Match, match_id, populate_existing=True)
        if games is not _UNSET:
            match.games = build_games(games)
        self.db.commit()
        self.db.refresh(match)
        return match

    def delete(self, match_id: str) -> bool:
        match = self.get(match_id)
        if match is None:
            return False
        self.db.delete(match)
        self.db.commit()
        return True

    def list_by_tournament_and_round(self, tournament_id: str, round_id: Optional[str] = None) -> List[Match]:
        stmt = select(Match).where(Match.tournament_id == tournament_id)
        if round_id:
            stmt = stmt.where(Match.round_id == round_id)
        stmt = stmt.order_by(Match.date.desc(), Match.created_at.desc())
        return list(self.db.scalars(stmt).all())

    def list_by_team(self, team_id: str) -> List[Match]:
        stmt = (
            select(Match)
            .where(or_(Match.team_id == team_id, Match.opponent_team_id == team_id))
            .order_by(Match.date.desc(), Match.created_at.desc())
        )
        return list(self.db.scalars(stmt).all())
