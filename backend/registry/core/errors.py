"""Error taxonomy shared by the auth and record-store layers."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    # auth
    INVALID_CREDENTIALS = "invalid_credentials"
    DUPLICATE_SIGNUP = "duplicate_signup"
    SESSION_FETCH_FAILED = "session_fetch_failed"
    SIGN_OUT_FAILED = "sign_out_failed"
    NOT_AUTHENTICATED = "not_authenticated"
    AUTH_PROVIDER_ERROR = "auth_provider_error"
    # record store
    LIST_FAILED = "list_failed"
    GET_FAILED = "get_failed"
    INSERT_FAILED = "insert_failed"
    UPDATE_FAILED = "update_failed"
    DELETE_FAILED = "delete_failed"
    # both
    NOT_CONFIGURED = "not_configured"


class RegistryError(Exception):
    """Base error carrying a machine-readable code and a message fit for display."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value!r}, {self.message!r})"


class AuthError(RegistryError):
    """Invalid credentials, duplicate sign-up or a failed session fetch."""


class RepositoryError(RegistryError):
    """Network or store failure on a worker table operation."""
