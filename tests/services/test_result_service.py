import pytest

from league.core.errors import AlreadyFinalized, InputNotPermitted, LockedByOther, NotFoundError, ValidationError
from league.models.match import Match, RESULT_DRAFT, RESULT_FINALIZED
from league.schemas.match_schemas import ResultAction
from league.services import result_service
from league.services.input_permission import DenialReason
from league.services.match_store import MatchStore

TEAM_A = "team-a"
TEAM_B = "team-b"


class FakeMatchStore(MatchStore):
    """In-memory store with the same conditional-write rules as the SQL one."""

    def __init__(self, *matches):
        self.matches = {m.id: m for m in matches}

    def get(self, match_id):
        return self.matches.get(match_id)

    def create(self, fields):
        fields = dict(fields)
        fields.pop("games", None)
        match = Match(**fields)
        self.matches[match.id] = match
        return match

    def _apply(self, match, fields):
        fields = dict(fields)
        fields.pop("games", None)
        for key, value in fields.items():
            setattr(match, key, value)
        return match

    def update(self, match_id, fields):
        match = self.get(match_id)
        if match is None:
            return None
        return self._apply(match, fields)

    def update_if_editable(self, match_id, fields, team_id):
        match = self.get(match_id)
        if (
            match is None
            or match.result_status == RESULT_FINALIZED
            or match.locked_by not in (None, team_id)
            or match.input_allowed_team_id != team_id
        ):
            return None
        return self._apply(match, fields)

    def delete(self, match_id):
        return self.matches.pop(match_id, None) is not None

    def list_by_tournament_and_round(self, tournament_id, round_id=None):
        return [m for m in self.matches.values() if m.tournament_id == tournament_id and (round_id is None or m.round_id == round_id)]

    def list_by_team(self, team_id):
        return [m for m in self.matches.values() if team_id in (m.team_id, m.opponent_team_id)]


class RacingMatchStore(FakeMatchStore):
    """Lets another team grab the lock between the read and the conditional write."""

    def __init__(self, rival, *matches):
        super().__init__(*matches)
        self.rival = rival

    def update_if_editable(self, match_id, fields, team_id):
        self.matches[match_id].locked_by = self.rival
        return super().update_if_editable(match_id, fields, team_id)


def make_match(**overrides):
    values = dict(
        id="match-1",
        tournament_id="t-1",
        round_id="r-1",
        team_id=TEAM_A,
        opponent_team_id=TEAM_B,
        input_allowed_team_id=TEAM_A,
        locked_by=None,
        locked_at=None,
        result_status=RESULT_DRAFT,
        finalized_at=None,
    )
    values.update(overrides)
    return Match(**values)


@pytest.fixture
def store():
    return FakeMatchStore(make_match())


class TestSave:

    def test_save_takes_the_lock(self, store):
        match = result_service.save(store, "match-1", TEAM_A, {"self_score": "2", "opponent_score": "1"})
        assert match.locked_by == TEAM_A
        assert match.locked_at is not None
        assert match.result_status == RESULT_DRAFT
        assert match.self_score == "2"

    def test_save_by_lock_owner_keeps_lock(self, store):
        result_service.save(store, "match-1", TEAM_A, {"self_score": "1"})
        match = result_service.save(store, "match-1", TEAM_A, {"self_score": "3"})
        assert match.locked_by == TEAM_A
        assert match.self_score == "3"

    def test_save_unknown_match(self, store):
        with pytest.raises(NotFoundError):
            result_service.save(store, "missing", TEAM_A)

    @pytest.mark.parametrize(
        "allowed,reason",
        [(None, DenialReason.NOT_OPEN), ("admin", DenialReason.ADMIN_ONLY), (TEAM_B, DenialReason.WRONG_TEAM)],
    )
    def test_permission_gate_runs_first(self, allowed, reason):
        store = FakeMatchStore(make_match(input_allowed_team_id=allowed, result_status=RESULT_FINALIZED))
        with pytest.raises(InputNotPermitted) as exc_info:
            result_service.save(store, "match-1", TEAM_A)
        assert exc_info.value.reason is reason
        assert exc_info.value.status_code == 403


class TestLockExclusivity:

    def test_other_team_cannot_save_or_finalize_while_locked(self, store):
        result_service.save(store, "match-1", TEAM_A, {"self_score": "2"})
        # Input handed to team B while A still holds the lock
        result_service.admin_update(store, "match-1", {"input_allowed_team_id": TEAM_B})

        with pytest.raises(LockedByOther):
            result_service.save(store, "match-1", TEAM_B, {"self_score": "0"})
        with pytest.raises(LockedByOther):
            result_service.finalize(store, "match-1", TEAM_B)
        assert store.get("match-1").self_score == "2"

    def test_lock_released_by_cancel(self, store):
        result_service.save(store, "match-1", TEAM_A)
        result_service.cancel(store, "match-1", TEAM_A)
        result_service.admin_update(store, "match-1", {"input_allowed_team_id": TEAM_B})

        match = result_service.save(store, "match-1", TEAM_B, {"self_score": "5"})
        assert match.locked_by == TEAM_B

    def test_lock_cleared_by_admin(self, store):
        result_service.save(store, "match-1", TEAM_A)
        result_service.admin_update(store, "match-1", {"locked_by": None, "locked_at": None, "input_allowed_team_id": TEAM_B})

        match = result_service.save(store, "match-1", TEAM_B)
        assert match.locked_by == TEAM_B

    def test_lost_race_is_reported_as_locked_by_other(self):
        store = RacingMatchStore(TEAM_B, make_match())
        with pytest.raises(LockedByOther):
            result_service.save(store, "match-1", TEAM_A, {"self_score": "1"})
        assert store.get("match-1").self_score is None


class TestFinalize:

    def test_finalize_releases_lock(self, store):
        result_service.save(store, "match-1", TEAM_A)
        match = result_service.finalize(store, "match-1", TEAM_A, {"opponent_score": "1"})
        assert match.result_status == RESULT_FINALIZED
        assert match.locked_by is None
        assert match.locked_at is None
        assert match.finalized_at is not None
        assert match.opponent_score == "1"

    def test_finalized_result_is_immutable_to_teams(self, store):
        result_service.finalize(store, "match-1", TEAM_A)
        with pytest.raises(AlreadyFinalized):
            result_service.save(store, "match-1", TEAM_A)
        with pytest.raises(AlreadyFinalized):
            result_service.finalize(store, "match-1", TEAM_A)

    def test_cancel_after_finalize_only_touches_lock(self, store):
        finalized = result_service.finalize(store, "match-1", TEAM_A, {"self_score": "2"})
        finalized_at = finalized.finalized_at

        match = result_service.cancel(store, "match-1", TEAM_A)
        assert match.result_status == RESULT_FINALIZED
        assert match.finalized_at == finalized_at
        assert match.self_score == "2"


class TestApplyAction:

    def test_dispatches_each_action(self, store):
        assert result_service.apply_action(store, "match-1", TEAM_A, ResultAction.SAVE).locked_by == TEAM_A
        assert result_service.apply_action(store, "match-1", TEAM_A, ResultAction.CANCEL).locked_by is None
        finalized = result_service.apply_action(store, "match-1", TEAM_A, ResultAction.FINALIZE)
        assert finalized.result_status == RESULT_FINALIZED

    def test_cancel_still_checks_permission(self):
        store = FakeMatchStore(make_match(input_allowed_team_id=None, locked_by=TEAM_A))
        with pytest.raises(InputNotPermitted):
            result_service.apply_action(store, "match-1", TEAM_A, ResultAction.CANCEL)


class TestAdminUpdate:

    def test_unfinalize_clears_finalized_at(self, store):
        result_service.finalize(store, "match-1", TEAM_A)
        match = result_service.admin_update(store, "match-1", {"result_status": RESULT_DRAFT})
        assert match.result_status == RESULT_DRAFT
        assert match.finalized_at is None

        again = result_service.save(store, "match-1", TEAM_A, {"self_score": "4"})
        assert again.self_score == "4"

    def test_finalize_stamps_finalized_at(self, store):
        match = result_service.admin_update(store, "match-1", {"result_status": RESULT_FINALIZED})
        assert match.result_status == RESULT_FINALIZED
        assert match.finalized_at is not None

        stamped = match.finalized_at
        again = result_service.admin_update(store, "match-1", {"result_status": RESULT_FINALIZED})
        assert again.finalized_at == stamped

    def test_ignores_guards(self):
        store = FakeMatchStore(make_match(result_status=RESULT_FINALIZED, locked_by=TEAM_B))
        match = result_service.admin_update(store, "match-1", {"self_score": "9", "input_allowed_team_id": "admin"})
        assert match.self_score == "9"
        assert match.input_allowed_team_id == "admin"

    def test_rejects_permission_for_team_outside_match(self, store):
        with pytest.raises(ValidationError):
            result_service.admin_update(store, "match-1", {"input_allowed_team_id": "team-elsewhere"})

    def test_team_change_rechecks_current_permission(self, store):
        with pytest.raises(ValidationError):
            result_service.admin_update(store, "match-1", {"team_id": "team-c"})
        assert store.get("match-1").team_id == TEAM_A

        match = result_service.admin_update(store, "match-1", {"opponent_team_id": "team-c"})
        assert match.opponent_team_id == "team-c"

    def test_null_status_is_ignored(self, store):
        match = result_service.admin_update(store, "match-1", {"result_status": None, "player": "Alice"})
        assert match.result_status == RESULT_DRAFT
        assert match.player == "Alice"

    def test_unknown_match(self, store):
        with pytest.raises(NotFoundError):
            result_service.admin_update(store, "missing", {"player": "Bob"})
