from sqlalchemy import Column, String, DateTime

from league.core.database import Base
from league.models._ids import new_id, utcnow

ROLE_ADMIN = "admin"
ROLE_TEAM = "team"


class User(Base):
    """An auth identity: either an administrator or a team login."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_ADMIN)
    display_name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
