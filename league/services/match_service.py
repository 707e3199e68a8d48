import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from league.core.errors import ForbiddenError, MatchFinalized, NotFoundError, ValidationError
from league.models.match import Match
from league.schemas import match_schemas
from league.services import round_service
from league.services.input_permission import validate_admin_permission
from league.services.match_store import MatchStore

logger = logging.getLogger(__name__)


def _require_scope(tournament_id: Optional[str], round_id: Optional[str]) -> None:
    if not tournament_id:
        raise ValidationError("tournament_id is required")
    if not round_id:
        raise ValidationError("round_id is required")


def get_match(store: MatchStore, match_id: str) -> Match:
    match = store.get(match_id)
    if match is None:
        raise NotFoundError("Match not found")
    return match


def list_matches(store: MatchStore, tournament_id: Optional[str], round_id: Optional[str] = None) -> List[Match]:
    if not tournament_id:
        raise ValidationError("tournament_id is required")
    return store.list_by_tournament_and_round(tournament_id, round_id)


def list_team_matches(store: MatchStore, team_id: str) -> List[Match]:
    return store.list_by_team(team_id)


def create_match_as_admin(db: Session, store: MatchStore, match_in: match_schemas.MatchCreate) -> Match:
    _require_scope(match_in.tournament_id, match_in.round_id)
    round_service.ensure_round_accepts_matches(db, match_in.tournament_id, match_in.round_id)

    fields = match_in.model_dump(exclude_unset=True)
    permission = validate_admin_permission(
        match_in.input_allowed_team_id, match_in.team_id, match_in.opponent_team_id
    )
    fields["input_allowed_team_id"] = permission.to_storage()

    match = store.create(fields)
    logger.info("Match created by administrator", extra={"match_id": match.id, "round_id": match.round_id})
    return match


def create_match_as_team(db: Session, store: MatchStore, team_id: str, match_in: match_schemas.TeamMatchCreate) -> Match:
    _require_scope(match_in.tournament_id, match_in.round_id)
    round_service.ensure_round_accepts_matches(db, match_in.tournament_id, match_in.round_id)

    fields = match_in.model_dump(exclude_unset=True)
    fields["team_id"] = team_id
    match = store.create(fields)
    logger.info("Match created by team", extra={"match_id": match.id, "team_id": team_id})
    return match


def _get_team_match(store: MatchStore, match_id: str, team_id: str) -> Match:
    match = get_match(store, match_id)
    if match.team_id != team_id:
        raise ForbiddenError("Not authorized to modify this match")
    if match.is_finalized:
        raise MatchFinalized()
    return match


def team_update_match(db: Session, store: MatchStore, match_id: str, team_id: str, match_in: match_schemas.TeamMatchCreate) -> Match:
    match = _get_team_match(store, match_id, team_id)
    fields: Dict[str, Any] = match_in.model_dump(exclude_unset=True)
    if not fields:
        raise ValidationError("Nothing to update")

    if "opponent_team_id" in fields and fields["opponent_team_id"] != match.opponent_team_id:
        # The current permission must still name one of the two teams
        validate_admin_permission(match.input_allowed_team_id, match.team_id, fields["opponent_team_id"])

    if "tournament_id" in fields or "round_id" in fields:
        tournament_id = fields.get("tournament_id") or match.tournament_id
        round_id = fields.get("round_id") or match.round_id
        round_service.ensure_round_accepts_matches(db, tournament_id, round_id)
        fields["tournament_id"] = tournament_id
        fields["round_id"] = round_id

    updated = store.update(match_id, fields)
    if updated is None:
        raise NotFoundError("Match not found")
    return updated


def team_delete_match(store: MatchStore, match_id: str, team_id: str) -> None:
    _get_team_match(store, match_id, team_id)
    store.delete(match_id)
    logger.info("Match deleted by team", extra={"match_id": match_id, "team_id": team_id})


def admin_delete_match(store: MatchStore, match_id: str) -> match_schemas.MatchRead:
    """Delete any match, finalized or not, and return what was removed."""
    snapshot = match_schemas.MatchRead.model_validate(get_match(store, match_id))
    if not store.delete(match_id):
        raise NotFoundError("Match not found")
    logger.info("Match deleted by administrator", extra={"match_id": match_id})
    return snapshot
