"""Supabase Auth (GoTrue) adapter.

Wraps ``client.auth`` of the async Supabase client and converts provider
objects and errors into the registry's own models and :class:`AuthError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

import httpx
from supabase import AsyncClient, AuthApiError
from supabase import AuthError as ProviderAuthError

from registry.core.errors import AuthError, ErrorCode
from registry.models.auth import Credentials, Session, SessionEvent, UserInfo

logger = logging.getLogger(__name__)

SessionCallback = Callable[[SessionEvent, Session | None], None]

_PROVIDER_ERRORS = (ProviderAuthError, httpx.HTTPError)


class ProviderSubscription(Protocol):
    def unsubscribe(self) -> None: ...


class AuthProvider(Protocol):
    async def sign_up(self, credentials: Credentials) -> UserInfo | None: ...

    async def sign_in(self, credentials: Credentials) -> Session: ...

    async def sign_out(self) -> None: ...

    async def get_session(self) -> Session | None: ...

    async def get_user(self) -> UserInfo | None: ...

    def on_session_change(self, callback: SessionCallback) -> ProviderSubscription: ...


def to_user(raw: Any) -> UserInfo | None:
    if raw is None:
        return None
    return UserInfo(id=str(raw.id), email=getattr(raw, "email", None))


def to_session(raw: Any) -> Session | None:
    if raw is None or getattr(raw, "user", None) is None:
        return None
    return Session(
        user=to_user(raw.user),
        access_token=raw.access_token or "",
        expires_at=getattr(raw, "expires_at", None),
    )


def _provider_message(err: Exception) -> str:
    return getattr(err, "message", None) or str(err) or "Une erreur est survenue"


class SupabaseAuthProvider:
    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def sign_up(self, credentials: Credentials) -> UserInfo | None:
        try:
            response = await self.client.auth.sign_up(
                {"email": credentials.email, "password": credentials.password}
            )
        except _PROVIDER_ERRORS as e:
            logger.error("Sign-up failed for %s: %s", credentials.email, e)
            raise AuthError(ErrorCode.AUTH_PROVIDER_ERROR, _provider_message(e)) from e

        user = response.user
        # Supabase answers a sign-up for an existing address with an identity-less user
        if user is not None and not user.identities:
            raise AuthError(ErrorCode.DUPLICATE_SIGNUP, "Un utilisateur avec cet email existe déjà.")
        return to_user(user)

    async def sign_in(self, credentials: Credentials) -> Session:
        try:
            response = await self.client.auth.sign_in_with_password(
                {"email": credentials.email, "password": credentials.password}
            )
        except AuthApiError as e:
            logger.warning("Sign-in rejected for %s: %s", credentials.email, e)
            raise AuthError(ErrorCode.INVALID_CREDENTIALS, _provider_message(e)) from e
        except _PROVIDER_ERRORS as e:
            logger.error("Sign-in failed for %s: %s", credentials.email, e)
            raise AuthError(ErrorCode.AUTH_PROVIDER_ERROR, _provider_message(e)) from e

        session = to_session(response.session)
        if session is None:
            raise AuthError(ErrorCode.INVALID_CREDENTIALS, "Aucune session retournée")
        return session

    async def sign_out(self) -> None:
        try:
            await self.client.auth.sign_out()
        except _PROVIDER_ERRORS as e:
            logger.error("Sign-out failed: %s", e)
            raise AuthError(ErrorCode.SIGN_OUT_FAILED, _provider_message(e)) from e

    async def get_session(self) -> Session | None:
        try:
            raw = await self.client.auth.get_session()
        except _PROVIDER_ERRORS as e:
            raise AuthError(ErrorCode.SESSION_FETCH_FAILED, _provider_message(e)) from e
        return to_session(raw)

    async def get_user(self) -> UserInfo | None:
        try:
            response = await self.client.auth.get_user()
        except _PROVIDER_ERRORS as e:
            raise AuthError(ErrorCode.SESSION_FETCH_FAILED, _provider_message(e)) from e
        return to_user(response.user) if response else None

    def on_session_change(self, callback: SessionCallback) -> ProviderSubscription:
        def _forward(event: str, raw_session: Any) -> None:
            try:
                kind = SessionEvent(event)
            except ValueError:
                logger.debug("Ignoring unknown auth event %s", event)
                return
            callback(kind, to_session(raw_session))

        return self.client.auth.on_auth_state_change(_forward)
