"""Worker list view: in-memory record set, derived filter and session-gated actions."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from enum import Enum

from registry.core.errors import RepositoryError
from registry.models.auth import SessionEvent, SessionState
from registry.models.views import Notification, WorkerListPage, WorkerRow
from registry.models.worker import (
    DEFAULT_BADGE_COLOR,
    DEPARTMENT_COLORS,
    EDUCATION_COLORS,
    GENDER_COLORS,
    Department,
    Worker,
)
from registry.services.session_store import SessionStore, Subscription
from registry.services.worker_forms import EditWorkerForm
from registry.services.worker_repository import WorkerRepository

logger = logging.getLogger(__name__)

SEARCHABLE_TEXT_FIELDS: tuple[str, ...] = (
    "nom",
    "prenom",
    "postnom",
    "departement",
    "niveau_etudes",
    "sexe",
)


def _text(value: object) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def matches_search(worker: Worker, term: str) -> bool:
    """Case-insensitive on the text fields, verbatim on the phone number."""
    needle = term.lower()
    if any(needle in _text(getattr(worker, name)).lower() for name in SEARCHABLE_TEXT_FIELDS):
        return True
    return term in worker.telephone


def filter_workers(
    workers: Iterable[Worker],
    department: Department | None = None,
    search: str = "",
) -> list[Worker]:
    return [
        worker
        for worker in workers
        if (department is None or worker.departement == department) and matches_search(worker, search)
    ]


class TimedNotification:
    """Notification that disappears ``ttl`` seconds after it was shown."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self.clock = clock
        self._notification: Notification | None = None
        self._expires_at: float = 0.0

    def show(self, notification: Notification) -> None:
        self._notification = notification
        self._expires_at = self.clock() + self.ttl

    def clear(self) -> None:
        self._notification = None

    @property
    def current(self) -> Notification | None:
        if self._notification is not None and self.clock() >= self._expires_at:
            self._notification = None
        return self._notification


class WorkerListView:
    def __init__(
        self,
        repository: WorkerRepository,
        store: SessionStore,
        *,
        notification_ttl: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.repository = repository
        self.store = store
        self.workers: list[Worker] = []
        self.loading: bool = True
        self.selected_department: Department | None = None
        self.search_term: str = ""
        self.editing: EditWorkerForm | None = None
        self.viewing: Worker | None = None
        self.delete_confirm: str | None = None
        self.user_email: str = ""
        self.is_logged_in: bool = False
        self.notification = TimedNotification(notification_ttl, clock)
        self._subscription: Subscription | None = None

    # lifecycle

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    def mount(self) -> None:
        if self.mounted:
            return
        self._subscription = self.store.subscribe(self._on_session_change)
        self._apply_session(self.store.state)

    def unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_session_change(self, event: SessionEvent | None, state: SessionState) -> None:
        self._apply_session(state)

    def _apply_session(self, state: SessionState) -> None:
        user = state.session.user if state.session else None
        self.user_email = (user.email or "") if user else ""
        self.is_logged_in = user is not None
        if not self.is_logged_in:
            self.editing = None
            self.delete_confirm = None

    # data

    @property
    def visible(self) -> list[Worker]:
        return filter_workers(self.workers, self.selected_department, self.search_term)

    def find(self, worker_id: str) -> Worker | None:
        return next((w for w in self.workers if w.id == worker_id), None)

    async def refresh(self) -> None:
        """Refetch the list; on failure the previously loaded workers stay in place."""
        self.loading = True
        try:
            workers = await self.repository.list_workers(self.selected_department)
        except RepositoryError as e:
            if self.mounted:
                self.notification.show(Notification.error(e.message))
            return
        finally:
            self.loading = False

        if not self.mounted:
            logger.debug("Worker list unmounted during fetch, discarding %d workers", len(workers))
            return
        self.workers = workers

    async def set_department(self, department: Department | None) -> None:
        changed = department != self.selected_department
        self.selected_department = department
        if changed:
            await self.refresh()

    def set_search(self, term: str) -> None:
        self.search_term = term

    async def apply_filters(self, department: Department | None, search: str) -> None:
        self.search_term = search
        self.selected_department = department
        await self.refresh()

    # actions

    async def load(self, worker_id: str) -> Worker | None:
        """Return the worker from the loaded list, or fetch it when the active filter hides it."""
        worker = self.find(worker_id)
        if worker is not None:
            return worker
        try:
            return await self.repository.get_worker(worker_id)
        except RepositoryError as e:
            self.notification.show(Notification.error(e.message))
            return None

    async def start_edit(self, worker_id: str) -> EditWorkerForm | None:
        if not self.is_logged_in:
            return None
        worker = await self.load(worker_id)
        # the session may have ended while the worker was fetched
        if worker is None or not self.is_logged_in:
            return None
        self.editing = EditWorkerForm(self.repository, self.store, worker)
        return self.editing

    def cancel_edit(self) -> None:
        self.editing = None

    async def submit_edit(self) -> bool:
        if self.editing is None or not self.is_logged_in:
            return False
        if not await self.editing.submit():
            if self.editing.message is not None:
                self.notification.show(self.editing.message)
            return False
        self.notification.show(Notification.success("Travailleur modifié avec succès"))
        self.editing = None
        await self.refresh()
        return True

    async def view(self, worker_id: str) -> Worker | None:
        """Open the detail panel. Available whether or not a session is present."""
        worker = await self.load(worker_id)
        if worker is None:
            return None
        self.viewing = worker
        return worker

    def close_view(self) -> None:
        self.viewing = None

    def request_delete(self, worker_id: str) -> None:
        if not self.is_logged_in:
            return
        self.delete_confirm = worker_id

    def cancel_delete(self) -> None:
        self.delete_confirm = None

    async def confirm_delete(self) -> bool:
        """Delete the worker awaiting confirmation, if any."""
        if self.delete_confirm is None:
            return False
        return await self.delete(self.delete_confirm)

    async def delete(self, worker_id: str) -> bool:
        if not self.is_logged_in:
            return False
        try:
            await self.repository.delete_worker(worker_id)
        except RepositoryError as e:
            self.notification.show(Notification.error(e.message))
            return False
        self.notification.show(Notification.success("Travailleur supprimé avec succès"))
        self.delete_confirm = None
        if self.viewing is not None and self.viewing.id == worker_id:
            self.viewing = None
        await self.refresh()
        return True

    # rendering

    def render(self) -> WorkerListPage:
        visible = self.visible
        count = len(visible)
        active_filters: list[str] = []
        if self.selected_department is not None:
            active_filters.append(f"Département: {self.selected_department.value}")
        if self.search_term:
            active_filters.append(f'Recherche: "{self.search_term}"')

        empty_message = None
        if not visible:
            empty_message = (
                "Commencez par ajouter votre premier travailleur."
                if not self.workers
                else "Aucun résultat ne correspond à vos critères de recherche."
            )

        return WorkerListPage(
            loading=self.loading,
            user_email=self.user_email,
            user_name=self.user_email.split("@")[0] if self.user_email else "Utilisateur",
            user_initial=self.user_email[0].upper() if self.user_email else "U",
            is_logged_in=self.is_logged_in,
            status_label="Connecté" if self.is_logged_in else "Non connecté",
            total=len(self.workers),
            visible_count=count,
            results_label=f"{count} résultat{'s' if count != 1 else ''}",
            department_filter=self.selected_department,
            search_term=self.search_term,
            active_filters=active_filters,
            rows=[self._row(worker) for worker in visible],
            empty_message=empty_message,
            notification=self.notification.current,
            editing=self.editing.render() if self.editing else None,
            viewing=self.viewing,
            delete_confirm=self.delete_confirm,
        )

    def _row(self, worker: Worker) -> WorkerRow:
        return WorkerRow(
            worker=worker,
            department_color=DEPARTMENT_COLORS.get(worker.departement, DEFAULT_BADGE_COLOR),
            education_color=EDUCATION_COLORS.get(worker.niveau_etudes, DEFAULT_BADGE_COLOR),
            gender_color=GENDER_COLORS.get(worker.sexe, DEFAULT_BADGE_COLOR),
            can_edit=self.is_logged_in,
            can_delete=self.is_logged_in,
        )
