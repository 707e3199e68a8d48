from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship

from league.core.database import Base
from league.models._ids import new_id, utcnow

RESULT_DRAFT = "draft"
RESULT_FINALIZED = "finalized"


class Match(Base):
    __tablename__ = "matches"

    id = Column(String(36), primary_key=True, default=new_id)
    tournament_id = Column(String(36), ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    round_id = Column(String(36), ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=True, index=True)  # home team, owns the record
    opponent_team_id = Column(String(36), ForeignKey("teams.id"), nullable=True, index=True)

    player = Column(Text, nullable=True)
    opponent_player = Column(Text, nullable=True)
    deck = Column(Text, nullable=True)
    opponent_deck = Column(Text, nullable=True)
    self_score = Column(String, nullable=True)
    opponent_score = Column(String, nullable=True)
    date = Column(DateTime(timezone=True), nullable=True)

    # NULL = nobody, "admin" = administrators only, otherwise a team id
    input_allowed_team_id = Column(String(36), nullable=True)
    locked_by = Column(String(36), nullable=True)
    locked_at = Column(DateTime(timezone=True), nullable=True)
    result_status = Column(String, nullable=False, default=RESULT_DRAFT)
    finalized_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    games = relationship(
        "MatchGame",
        back_populates="match",
        cascade="all, delete-orphan",
        order_by="MatchGame.game_number",
    )
    round = relationship("Round")
    team = relationship("Team", foreign_keys=[team_id])
    opponent_team = relationship("Team", foreign_keys=[opponent_team_id])

    @property
    def is_finalized(self) -> bool:
        return self.result_status == RESULT_FINALIZED


class MatchGame(Base):
    """One game of a match's per-game breakdown."""
    __tablename__ = "match_games"

    id = Column(String(36), primary_key=True, default=new_id)
    match_id = Column(String(36), ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True)
    game_number = Column(Integer, nullable=False)
    player = Column(Text, nullable=True)
    opponent_player = Column(Text, nullable=True)
    deck = Column(Text, nullable=True)
    opponent_deck = Column(Text, nullable=True)
    self_score = Column(String, nullable=True)
    opponent_score = Column(String, nullable=True)

    match = relationship("Match", back_populates="games")
