from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ParticipantCreate(BaseModel):
    name: Optional[str] = None
    can_edit: bool = Field(False, validation_alias=AliasChoices("can_edit", "canEdit"))


class ParticipantUpdate(BaseModel):
    name: Optional[str] = None
    can_edit: Optional[bool] = Field(None, validation_alias=AliasChoices("can_edit", "canEdit"))
    # Admins may move a participant to another team they own
    team_id: Optional[str] = None


class ParticipantRead(BaseModel):
    id: str
    team_id: str
    name: str
    can_edit: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
