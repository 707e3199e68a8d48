from pydantic import BaseModel, Field
from typing import Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    user_id: str
    role: Optional[str] = None


class LoginRequest(BaseModel):
    # Teams log in with their synthetic address, so this is not an EmailStr
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    new_password: str
