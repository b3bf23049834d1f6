from __future__ import annotations

import logging

from registry.core.config import Settings
from registry.core.errors import AuthError
from registry.models.views import HomePage, Notification
from registry.services.session_store import SessionStore

logger = logging.getLogger(__name__)


def display_name(email: str | None) -> str:
    return email.split("@")[0] if email else "Utilisateur"


class HomeView:
    def __init__(self, store: SessionStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings
        self.message: Notification | None = None

    async def logout(self) -> str | None:
        """Sign out and return the path to navigate to, or None if sign-out failed."""
        try:
            await self.store.sign_out()
        except AuthError as e:
            logger.error("Sign-out failed: %r", e)
            self.message = Notification.error(f"Erreur lors de la déconnexion: {e.message}")
            return None
        return self.settings.AUTH_PATH

    def render(self) -> HomePage:
        user = self.store.user
        name = display_name(user.email if user else None)
        return HomePage(
            user=user,
            user_name=name,
            user_initial=name[0].upper(),
            add_worker_path=self.settings.ADD_WORKER_PATH,
            worker_list_path=self.settings.WORKER_LIST_PATH,
            message=self.message,
        )
