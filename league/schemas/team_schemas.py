from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TeamRegister(BaseModel):
    name: Optional[str] = None
    tournament_id: Optional[str] = Field(None, validation_alias=AliasChoices("tournament_id", "tournamentId"))


class TeamUpdate(BaseModel):
    name: Optional[str] = None


class TeamRead(BaseModel):
    id: str
    name: str
    username: str
    tournament_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TeamRegistered(TeamRead):
    email: str
    generated_password: str


class TeamSummary(BaseModel):
    id: str
    name: str
    username: str
    can_edit: bool
    tournament_id: Optional[str] = None
    created_at: datetime
