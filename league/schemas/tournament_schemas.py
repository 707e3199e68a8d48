from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class TournamentCreate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None


class TournamentRead(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoundCreate(BaseModel):
    title: Optional[str] = None


class RoundRead(BaseModel):
    id: str
    tournament_id: str
    number: int
    title: Optional[str] = None
    status: str
    created_at: datetime
    closed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
