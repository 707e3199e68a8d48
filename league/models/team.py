from sqlalchemy import Column, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship

from league.core.database import Base
from league.models._ids import new_id, utcnow


class Team(Base):
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)
    auth_user_id = Column(String(36), ForeignKey("users.id"), nullable=True, unique=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    tournament_id = Column(String(36), ForeignKey("tournaments.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    tournament = relationship("Tournament", back_populates="teams")
    auth_user = relationship("User", foreign_keys=[auth_user_id])
    participants = relationship(
        "Participant",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="Participant.name",
    )
