"""Add and edit forms for worker records."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import ValidationError

from registry.core.errors import AuthError, ErrorCode, RegistryError, RepositoryError
from registry.models.views import Notification, WorkerFormState
from registry.models.worker import Worker, WorkerFormData, WorkerUpdate
from registry.services.session_store import SessionStore
from registry.services.worker_repository import WorkerRepository

logger = logging.getLogger(__name__)

FORM_FIELDS: tuple[str, ...] = (
    "nom",
    "postnom",
    "prenom",
    "telephone",
    "departement",
    "sexe",
    "date_adhesion",
    "niveau_etudes",
)


def empty_fields() -> dict[str, str]:
    return {name: "" for name in FORM_FIELDS}


def fields_from_worker(worker: Worker) -> dict[str, str]:
    data = worker.model_dump(mode="json")
    return {name: str(data[name]) for name in FORM_FIELDS}


def _invalid_fields(err: ValidationError) -> str:
    names = sorted({str(error["loc"][0]) for error in err.errors() if error["loc"]})
    return ", ".join(names)


class WorkerForm:
    """Raw field values plus the last message shown to the user."""

    def __init__(
        self,
        repository: WorkerRepository,
        store: SessionStore,
        fields: Mapping[str, str] | None = None,
    ) -> None:
        self.repository = repository
        self.store = store
        self.worker_id: str | None = None
        self.fields: dict[str, str] = {**empty_fields(), **(fields or {})}
        self.loading: bool = False
        self.message: Notification | None = None

    @staticmethod
    def check_field_names(values: Mapping[str, str]) -> None:
        unknown = sorted(set(values) - set(FORM_FIELDS))
        if unknown:
            raise KeyError(f"Unknown worker field: {', '.join(unknown)}")

    def change(self, name: str, value: str) -> None:
        self.check_field_names({name: value})
        self.fields[name] = value
        self.message = None

    def change_many(self, values: Mapping[str, str]) -> None:
        for name, value in values.items():
            self.change(name, value)

    def validated(self, error_prefix: str) -> WorkerFormData | None:
        try:
            return WorkerFormData.model_validate(self.fields)
        except ValidationError as e:
            self.message = Notification.error(f"{error_prefix}: champs invalides ({_invalid_fields(e)})")
            return None

    def render(self) -> WorkerFormState:
        return WorkerFormState(
            worker_id=self.worker_id,
            fields=dict(self.fields),
            loading=self.loading,
            message=self.message,
        )


class AddWorkerForm(WorkerForm):
    async def submit(self) -> Worker | None:
        """Insert the worker; on failure the field values are kept as typed."""
        self.message = None
        data = self.validated("Erreur lors de l'ajout")
        if data is None:
            return None

        self.loading = True
        try:
            user = self.store.user
            if user is None:
                raise AuthError(ErrorCode.NOT_AUTHENTICATED, "Utilisateur non connecté")
            worker = await self.repository.insert_worker(data, creator=user.id)
        except RegistryError as e:
            logger.error("Failed to add worker: %r", e)
            self.message = Notification.error(f"Erreur lors de l'ajout: {e.message}")
            return None
        finally:
            self.loading = False

        self.message = Notification.success("Travailleur ajouté avec succès!")
        self.fields = empty_fields()
        return worker


class EditWorkerForm(WorkerForm):
    def __init__(self, repository: WorkerRepository, store: SessionStore, worker: Worker) -> None:
        super().__init__(repository, store, fields_from_worker(worker))
        self.worker_id = worker.id

    async def submit(self) -> bool:
        if not self.store.is_logged_in:
            logger.debug("Ignoring edit of %s without a session", self.worker_id)
            return False

        self.message = None
        data = self.validated("Erreur lors de la modification")
        if data is None:
            return False

        self.loading = True
        try:
            await self.repository.update_worker(self.worker_id, WorkerUpdate(**data.model_dump()))
        except RepositoryError as e:
            logger.error("Failed to update worker %s: %r", self.worker_id, e)
            self.message = Notification.error(e.message)
            return False
        finally:
            self.loading = False

        self.message = Notification.success("Travailleur modifié avec succès")
        return True
