from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from cbt.models.user import UserRole
from cbt.schemas.base import CamelModel


class SignupRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    full_name: Optional[str] = Field(None, max_length=255)
    role: UserRole = UserRole.STUDENT

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    @field_validator('full_name')
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return v
        return v.strip() or None


class SigninRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class UserInfo(CamelModel):
    id: str
    email: str


class ProfileResponse(CamelModel):
    id: str
    user_id: str
    email: str
    full_name: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    """Returned by signin/signup. The token is also set as the session cookie."""
    user: UserInfo
    profile: ProfileResponse
    access_token: str
    token_type: str = "bearer"


class SessionResponse(CamelModel):
    user: Optional[UserInfo] = None
    profile: Optional[ProfileResponse] = None
