"""Auth request/response models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from notebridge.api.schemas.common import CamelRequest, CamelResponse
from notebridge.api.schemas.rows import UtcDatetime

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class SignupRequest(CamelRequest):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    password: str = Field(min_length=8)
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)


class LoginRequest(CamelRequest):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=320)
    password: str = Field(min_length=1)


class RefreshRequest(CamelRequest):
    refresh_token: str = Field(min_length=1)


class LogoutRequest(CamelRequest):
    refresh_token: str | None = Field(default=None, min_length=1)
    all_devices: bool = False


class UserProfileOut(CamelResponse):
    first_name: str | None = None
    last_name: str | None = None
    language: str = "est"


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: str
    profile: UserProfileOut | None = None


class TokenResponse(CamelResponse):
    access_token: str
    refresh_token: str
    refresh_token_expires_at: UtcDatetime
    user: UserOut


class MeResponse(BaseModel):
    user: UserOut


class MessageResponse(BaseModel):
    message: str
