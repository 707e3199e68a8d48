from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship

from league.core.database import Base
from league.models._ids import new_id, utcnow

ROUND_OPEN = "open"
ROUND_CLOSED = "closed"


class Round(Base):
    __tablename__ = "rounds"
    # Two concurrent creates computing the same next number cannot both commit
    __table_args__ = (UniqueConstraint("tournament_id", "number", name="uq_rounds_tournament_number"),)

    id = Column(String(36), primary_key=True, default=new_id)
    tournament_id = Column(String(36), ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    title = Column(String, nullable=True)
    status = Column(String, nullable=False, default=ROUND_OPEN)  # "open" or "closed"
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    tournament = relationship("Tournament", back_populates="rounds")
