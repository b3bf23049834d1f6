"""Process-wide session store.

Resolves the current session from the auth provider once on startup, then
follows provider-pushed session events. Every resolution takes a sequence
number when it starts; a result older than the latest applied one is dropped,
so a slow initial fetch can never overwrite a newer sign-in or sign-out event.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from types import TracebackType

from registry.core.errors import AuthError, ErrorCode
from registry.models.auth import Credentials, Session, SessionEvent, SessionState, UserInfo
from registry.services.auth_provider import AuthProvider, ProviderSubscription

logger = logging.getLogger(__name__)

# event is None for the initial resolution and explicit refreshes
SessionListener = Callable[[SessionEvent | None, SessionState], None]


class Subscription:
    """Handle returned by :meth:`SessionStore.subscribe`; releasing it twice is a no-op."""

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Callable[[], None] | None = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unsubscribe()


class SessionStore:
    def __init__(self, provider: AuthProvider | None = None) -> None:
        self.provider = provider
        self.initialized: bool = False
        self._session: Session | None = None
        self._loading: bool = True
        self._listeners: dict[int, SessionListener] = {}
        self._listener_ids = itertools.count()
        self._sequence = itertools.count(1)
        self._applied_sequence = 0
        self._provider_subscription: ProviderSubscription | None = None

    @property
    def state(self) -> SessionState:
        return SessionState(session=self._session, loading=self._loading)

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def user(self) -> UserInfo | None:
        return self._session.user if self._session else None

    @property
    def is_logged_in(self) -> bool:
        return self._session is not None

    async def initialize(self) -> None:
        if self.initialized:
            return
        self.initialized = True

        if self.provider is None:
            logger.warning("Auth provider missing — session resolved as logged out")
            self._apply(next(self._sequence), None, None)
            return

        # subscribe first so events racing the initial fetch are not lost
        try:
            self._provider_subscription = self.provider.on_session_change(self._on_provider_event)
        except Exception:
            logger.exception("Could not subscribe to auth events")
        await self.refresh()
        logger.info("SessionStore initialized (logged_in=%s)", self.is_logged_in)

    async def close(self) -> None:
        if self._provider_subscription is not None:
            self._provider_subscription.unsubscribe()
            self._provider_subscription = None
        self._listeners.clear()
        self.initialized = False

    async def refresh(self) -> SessionState:
        sequence = next(self._sequence)
        session: Session | None = None
        if self.provider is not None:
            try:
                session = await self.provider.get_session()
            except Exception:
                logger.exception("Session resolution failed, treating as logged out")
        self._apply(sequence, None, session)
        return self.state

    def subscribe(self, listener: SessionListener) -> Subscription:
        listener_id = next(self._listener_ids)
        self._listeners[listener_id] = listener
        return Subscription(lambda: self._listeners.pop(listener_id, None))

    async def sign_up(self, credentials: Credentials) -> UserInfo | None:
        return await self._require_provider().sign_up(credentials)

    async def sign_in(self, credentials: Credentials) -> Session:
        sequence = next(self._sequence)
        session = await self._require_provider().sign_in(credentials)
        self._apply(sequence, SessionEvent.SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        sequence = next(self._sequence)
        await self._require_provider().sign_out()
        self._apply(sequence, SessionEvent.SIGNED_OUT, None)

    def _require_provider(self) -> AuthProvider:
        if self.provider is None:
            raise AuthError(ErrorCode.NOT_CONFIGURED, "Service d'authentification non configuré")
        return self.provider

    def _on_provider_event(self, event: SessionEvent, session: Session | None) -> None:
        if event is SessionEvent.SIGNED_OUT:
            session = None
        self._apply(next(self._sequence), event, session)

    def _apply(self, sequence: int, event: SessionEvent | None, session: Session | None) -> bool:
        if sequence <= self._applied_sequence:
            logger.debug(
                "Discarding stale session resolution #%s (latest applied #%s)",
                sequence,
                self._applied_sequence,
            )
            return False

        self._applied_sequence = sequence
        self._session = session
        self._loading = False

        state = self.state
        for listener in list(self._listeners.values()):
            listener(event, state)
        return True
