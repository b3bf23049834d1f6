from __future__ import annotations

import logging
from enum import Enum

from pydantic import ValidationError

from registry.core.errors import AuthError, ErrorCode
from registry.models.auth import Credentials, Session
from registry.models.views import AuthPage, Notification
from registry.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class AuthMode(str, Enum):
    LOGIN = "login"
    SIGNUP = "signup"


_AUTH_FIELDS = ("email", "password")


class AuthView:
    def __init__(self, store: SessionStore, mode: AuthMode = AuthMode.LOGIN) -> None:
        self.store = store
        self.mode = mode
        self.fields: dict[str, str] = {"email": "", "password": ""}
        self.loading: bool = False
        self.message: Notification | None = None

    def change(self, name: str, value: str) -> None:
        if name not in _AUTH_FIELDS:
            raise KeyError(f"Unknown auth field: {name}")
        self.fields[name] = value
        self.message = None

    def toggle_mode(self) -> None:
        self.mode = AuthMode.SIGNUP if self.mode is AuthMode.LOGIN else AuthMode.LOGIN
        self._reset_fields()
        self.message = None

    def _reset_fields(self) -> None:
        self.fields = {"email": "", "password": ""}

    async def submit(self) -> Session | None:
        """Sign up or sign in; returns the new session after a successful login."""
        self.message = None
        try:
            credentials = Credentials(**self.fields)
        except ValidationError:
            self.message = Notification.error(
                "Erreur: email invalide ou mot de passe trop court (minimum 6 caractères)"
            )
            return None

        self.loading = True
        try:
            if self.mode is AuthMode.SIGNUP:
                await self.store.sign_up(credentials)
                self.message = Notification.success(
                    "Inscription réussie ! Vous pouvez maintenant vous connecter."
                )
                self.mode = AuthMode.LOGIN
                self._reset_fields()
                return None
            return await self.store.sign_in(credentials)
        except AuthError as e:
            logger.error("Authentication failed (%s): %r", self.mode.value, e)
            text = e.message if e.code is ErrorCode.DUPLICATE_SIGNUP else f"Erreur: {e.message}"
            self.message = Notification.error(text)
            return None
        finally:
            self.loading = False

    def render(self) -> AuthPage:
        login = self.mode is AuthMode.LOGIN
        return AuthPage(
            mode=self.mode.value,
            title="Connexion" if login else "Inscription",
            subtitle=(
                "Content de vous revoir ! Connectez-vous à votre compte."
                if login
                else "Rejoignez-nous ! Créez votre compte en quelques secondes."
            ),
            email=self.fields["email"],
            loading=self.loading,
            message=self.message,
            submit_label="Se connecter" if login else "S'inscrire",
            switch_prompt="Pas de compte ?" if login else "Déjà un compte ?",
            switch_label="Créer un compte" if login else "Se connecter",
            password_hint=None if login else "Minimum 6 caractères",
        )
