"""Authentication models for Supabase sessions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SessionEvent(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    MFA_CHALLENGE_VERIFIED = "MFA_CHALLENGE_VERIFIED"


class UserInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str | None = None


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: UserInfo
    access_token: str = Field(default="", repr=False)
    expires_at: int | None = None

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def email(self) -> str | None:
        return self.user.email


class SessionState(BaseModel):
    """Point-in-time snapshot handed to subscribers of the session store."""

    model_config = ConfigDict(frozen=True)

    session: Session | None = None
    loading: bool = True

    @property
    def is_logged_in(self) -> bool:
        return self.session is not None


class SessionInfo(BaseModel):
    loading: bool
    is_logged_in: bool
    user: UserInfo | None = None
    expires_at: int | None = None


class Credentials(BaseModel):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6)
