"""
Result edit state machine.

A match result is in one of three states:

    Unlocked-Draft          result_status=draft, locked_by=NULL
    Locked-Draft(team)      result_status=draft, locked_by=team
    Finalized               result_status=finalized

Teams move between them with ``save``, ``finalize`` and ``cancel``, always
behind the input permission gate. Administrators use ``admin_update``, which
checks nothing and is the way to clear a stuck lock or unfinalize a result.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from league.core.errors import AlreadyFinalized, InputNotPermitted, LockedByOther, NotFoundError
from league.models.match import Match, RESULT_DRAFT, RESULT_FINALIZED
from league.schemas.match_schemas import ResultAction
from league.services.input_permission import InputPermission, resolve_permission, validate_admin_permission
from league.services.match_store import MatchStore

logger = logging.getLogger(__name__)

_MISSING = object()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _get_match(store: MatchStore, match_id: str) -> Match:
    match = store.get(match_id)
    if match is None:
        raise NotFoundError("Match not found")
    return match


def _check_permission(match: Match, team_id: str) -> None:
    decision = resolve_permission(InputPermission.from_storage(match.input_allowed_team_id), team_id)
    if not decision.allowed:
        raise InputNotPermitted(decision.reason, decision.message)


def _check_editable(match: Match, team_id: str) -> None:
    if match.result_status == RESULT_FINALIZED:
        raise AlreadyFinalized()
    if match.locked_by and match.locked_by != team_id:
        raise LockedByOther()


def save(store: MatchStore, match_id: str, team_id: str, payload: Optional[Dict[str, Any]] = None) -> Match:
    """Store a draft result and take (or keep) the edit lock."""
    fields = dict(payload or {})
    fields.update(result_status=RESULT_DRAFT, locked_by=team_id, locked_at=_now())
    return _guarded_write(store, match_id, team_id, fields, ResultAction.SAVE)


def finalize(store: MatchStore, match_id: str, team_id: str, payload: Optional[Dict[str, Any]] = None) -> Match:
    """Store the final result and release the lock."""
    fields = dict(payload or {})
    fields.update(result_status=RESULT_FINALIZED, locked_by=None, locked_at=None, finalized_at=_now())
    return _guarded_write(store, match_id, team_id, fields, ResultAction.FINALIZE)


def cancel(store: MatchStore, match_id: str, team_id: str) -> Match:
    """Release the edit lock. Saved fields and the result status are left alone."""
    match = _get_match(store, match_id)
    _check_permission(match, team_id)
    updated = store.update(match_id, {"locked_by": None, "locked_at": None})
    if updated is None:
        raise NotFoundError("Match not found")
    logger.info("Match result lock released", extra={"match_id": match_id, "team_id": team_id})
    return updated


def _guarded_write(store: MatchStore, match_id: str, team_id: str, fields: Dict[str, Any], action: ResultAction) -> Match:
    match = _get_match(store, match_id)
    _check_permission(match, team_id)
    _check_editable(match, team_id)

    updated = store.update_if_editable(match_id, fields, team_id)
    if updated is None:
        # Something changed between the read and the write; report what it was.
        current = _get_match(store, match_id)
        _check_permission(current, team_id)
        _check_editable(current, team_id)
        logger.warning(
            "Result write lost a race without a visible cause",
            extra={"match_id": match_id, "team_id": team_id, "action": action.value},
        )
        raise LockedByOther()

    logger.info("Match result %s", action.value, extra={"match_id": match_id, "team_id": team_id})
    return updated


def apply_action(store: MatchStore, match_id: str, team_id: str, action: ResultAction, payload: Optional[Dict[str, Any]] = None) -> Match:
    if action is ResultAction.SAVE:
        return save(store, match_id, team_id, payload)
    if action is ResultAction.FINALIZE:
        return finalize(store, match_id, team_id, payload)
    return cancel(store, match_id, team_id)


def admin_update(store: MatchStore, match_id: str, fields: Dict[str, Any]) -> Match:
    """Unrestricted update used by administrators.

    The permission value is still checked for shape: it must name nobody,
    administrators, or one of the match's two teams.
    """
    match = _get_match(store, match_id)
    fields = dict(fields)

    permission = fields.get("input_allowed_team_id", _MISSING)
    team_id = fields.get("team_id", match.team_id)
    opponent_team_id = fields.get("opponent_team_id", match.opponent_team_id)
    if permission is not _MISSING:
        fields["input_allowed_team_id"] = validate_admin_permission(permission, team_id, opponent_team_id).to_storage()
    elif (team_id, opponent_team_id) != (match.team_id, match.opponent_team_id):
        validate_admin_permission(match.input_allowed_team_id, team_id, opponent_team_id)

    if "result_status" in fields and fields["result_status"] is None:
        del fields["result_status"]
    if fields.get("result_status") == RESULT_DRAFT and "finalized_at" not in fields:
        fields["finalized_at"] = None
    if fields.get("result_status") == RESULT_FINALIZED and fields.get("finalized_at") is None:
        fields["finalized_at"] = match.finalized_at or _now()

    updated = store.update(match_id, fields)
    if updated is None:
        raise NotFoundError("Match not found")
    logger.info("Match updated by administrator", extra={"match_id": match_id, "fields": sorted(fields)})
    return updated
