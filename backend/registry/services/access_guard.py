"""Access guard deciding whether protected content renders, waits or redirects."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import TracebackType

from registry.models.auth import Session, SessionEvent, SessionState
from registry.services.session_store import SessionStore, Subscription

logger = logging.getLogger(__name__)

LOADING_TEXT = "Vérification..."


class GuardState(str, Enum):
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class GuardOutcome:
    state: GuardState
    redirect_to: str | None = None
    loading_text: str | None = None

    @property
    def renders_content(self) -> bool:
        return self.state is GuardState.AUTHENTICATED


class AccessGuard:
    """Three-state guard bound to a :class:`SessionStore`.

    ``mount()`` enters CHECKING and subscribes to the store; if the store has
    already resolved, the guard transitions immediately. While mounted, every
    pushed session event re-evaluates the state. An unauthenticated guard
    always redirects to ``auth_path``.
    """

    def __init__(self, store: SessionStore, auth_path: str) -> None:
        self.store = store
        self.auth_path = auth_path
        self.state = GuardState.CHECKING
        self._subscription: Subscription | None = None

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    def mount(self) -> None:
        if self.mounted:
            return
        self.state = GuardState.CHECKING
        self._subscription = self.store.subscribe(self._on_session_change)
        if not self.store.loading:
            self._transition(self.store.session)

    def unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self) -> AccessGuard:
        self.mount()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unmount()

    def outcome(self) -> GuardOutcome:
        if self.state is GuardState.CHECKING:
            return GuardOutcome(self.state, loading_text=LOADING_TEXT)
        if self.state is GuardState.UNAUTHENTICATED:
            return GuardOutcome(self.state, redirect_to=self.auth_path)
        return GuardOutcome(self.state)

    def _on_session_change(self, event: SessionEvent | None, state: SessionState) -> None:
        if event is SessionEvent.SIGNED_OUT:
            self._transition(None)
        else:
            self._transition(state.session)

    def _transition(self, session: Session | None) -> None:
        new_state = GuardState.AUTHENTICATED if session is not None else GuardState.UNAUTHENTICATED
        if new_state is not self.state:
            logger.debug("Access guard %s -> %s", self.state.value, new_state.value)
            self.state = new_state
