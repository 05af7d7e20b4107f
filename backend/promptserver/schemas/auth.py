"""Auth Schemas — sign-up, login, token and login-history payloads.

Invariants:
    - Email format and password policy are enforced by SignUpCommand, not here
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)
    name: str = Field(min_length=1, max_length=100)


class SignUpResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uuid: UUID
    email: str
    name: str
    created_at: datetime


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


class LoginHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    login_at: datetime
    ip_address: str | None
    user_agent: str | None
    status: str
