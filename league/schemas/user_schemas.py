from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr


class AdminUserCreate(BaseModel):
    email: EmailStr
    password: str
    display_name: Optional[str] = None


class UserRead(BaseModel):
    id: str
    email: str
    role: str
    display_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
