from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _alias(name: str, legacy: str):
    return Field(None, validation_alias=AliasChoices(name, legacy))


class ResultAction(str, Enum):
    SAVE = "save"
    FINALIZE = "finalize"
    CANCEL = "cancel"


class _ScoreFields(BaseModel):
    @field_validator("self_score", "opponent_score", mode="before", check_fields=False)
    @classmethod
    def score_as_text(cls, v):
        # Scores are stored as text; accept plain numbers from clients
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class MatchGameIn(_ScoreFields):
    player: Optional[str] = None
    opponent_player: Optional[str] = _alias("opponent_player", "opponentPlayer")
    deck: Optional[str] = None
    opponent_deck: Optional[str] = _alias("opponent_deck", "opponentDeck")
    self_score: Optional[str] = _alias("self_score", "selfScore")
    opponent_score: Optional[str] = _alias("opponent_score", "opponentScore")


class MatchGameRead(BaseModel):
    game_number: int
    player: Optional[str] = None
    opponent_player: Optional[str] = None
    deck: Optional[str] = None
    opponent_deck: Optional[str] = None
    self_score: Optional[str] = None
    opponent_score: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MatchDetails(_ScoreFields):
    """Score and detail fields: the only fields a team may write."""
    player: Optional[str] = None
    opponent_player: Optional[str] = _alias("opponent_player", "opponentPlayer")
    deck: Optional[str] = None
    opponent_deck: Optional[str] = _alias("opponent_deck", "opponentDeck")
    self_score: Optional[str] = _alias("self_score", "selfScore")
    opponent_score: Optional[str] = _alias("opponent_score", "opponentScore")
    date: Optional[datetime] = None
    games: Optional[List[MatchGameIn]] = None


class TeamMatchCreate(MatchDetails):
    tournament_id: Optional[str] = _alias("tournament_id", "tournamentId")
    round_id: Optional[str] = _alias("round_id", "roundId")
    opponent_team_id: Optional[str] = _alias("opponent_team_id", "opponentTeamId")


class MatchCreate(TeamMatchCreate):
    team_id: Optional[str] = _alias("team_id", "teamId")
    input_allowed_team_id: Optional[str] = None


class AdminMatchUpdate(MatchCreate):
    """Unrestricted update, including the lock and permission fields."""
    locked_by: Optional[str] = None
    locked_at: Optional[datetime] = None
    result_status: Optional[Literal["draft", "finalized"]] = None
    finalized_at: Optional[datetime] = None


class ResultActionRequest(BaseModel):
    action: ResultAction
    payload: Optional[MatchDetails] = None


class MatchRead(BaseModel):
    id: str
    tournament_id: str
    round_id: str
    team_id: Optional[str] = None
    opponent_team_id: Optional[str] = None
    player: Optional[str] = None
    opponent_player: Optional[str] = None
    deck: Optional[str] = None
    opponent_deck: Optional[str] = None
    self_score: Optional[str] = None
    opponent_score: Optional[str] = None
    date: Optional[datetime] = None
    input_allowed_team_id: Optional[str] = None
    locked_by: Optional[str] = None
    locked_at: Optional[datetime] = None
    result_status: str
    finalized_at: Optional[datetime] = None
    created_at: datetime
    games: List[MatchGameRead] = []

    model_config = ConfigDict(from_attributes=True)
