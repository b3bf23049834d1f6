from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from registry.core.dependencies import (
    get_session_store,
    get_worker_list_view,
    get_worker_repository,
    require_session,
)
from registry.models.auth import Session
from registry.models.views import WorkerFormState, WorkerListPage
from registry.models.worker import Department, Worker
from registry.services.session_store import SessionStore
from registry.services.worker_forms import AddWorkerForm
from registry.services.worker_list import WorkerListView
from registry.services.worker_repository import WorkerRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["workers"])


def _check_fields(values: dict[str, str]) -> None:
    try:
        AddWorkerForm.check_field_names(values)
    except KeyError as err:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=err.args[0]) from err


@router.get("/add-worker", response_model=WorkerFormState)
async def add_worker_page(
    session: Session = Depends(require_session),  # noqa: B008
    store: SessionStore = Depends(get_session_store),  # noqa: B008
    repository: WorkerRepository = Depends(get_worker_repository),  # noqa: B008
):
    return AddWorkerForm(repository, store).render()


@router.post("/add-worker", response_model=WorkerFormState)
async def add_worker(
    values: dict[str, str],
    response: Response,
    session: Session = Depends(require_session),  # noqa: B008
    store: SessionStore = Depends(get_session_store),  # noqa: B008
    repository: WorkerRepository = Depends(get_worker_repository),  # noqa: B008
):
    _check_fields(values)
    form = AddWorkerForm(repository, store)
    form.change_many(values)
    worker = await form.submit()
    response.status_code = status.HTTP_201_CREATED if worker else status.HTTP_400_BAD_REQUEST
    return form.render()


@router.get("/worker-list", response_model=WorkerListPage)
async def worker_list_page(
    department: Department | None = None,
    search: str = "",
    session: Session = Depends(require_session),  # noqa: B008
    view: WorkerListView = Depends(get_worker_list_view),  # noqa: B008
):
    await view.apply_filters(department, search)
    return view.render()


def _not_found(worker_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Worker '{worker_id}' not found",
    )


@router.get("/worker-list/{worker_id}", response_model=Worker)
async def worker_detail(
    worker_id: str,
    session: Session = Depends(require_session),  # noqa: B008
    view: WorkerListView = Depends(get_worker_list_view),  # noqa: B008
):
    worker = await view.view(worker_id)
    if worker is None:
        raise _not_found(worker_id)
    return worker


@router.delete("/worker-list/{worker_id}/detail", response_model=WorkerListPage)
async def close_worker_detail(
    worker_id: str,
    session: Session = Depends(require_session),  # noqa: B008
    view: WorkerListView = Depends(get_worker_list_view),  # noqa: B008
):
    if view.viewing is not None and view.viewing.id == worker_id:
        view.close_view()
    return view.render()


@router.post("/worker-list/{worker_id}/edit", response_model=WorkerListPage)
async def open_edit_form(
    worker_id: str,
    session: Session = Depends(require_session),  # noqa: B008
    view: WorkerListView = Depends(get_worker_list_view),  # noqa: B008
):
    if await view.start_edit(worker_id) is None:
        raise _not_found(worker_id)
    return view.render()


@router.delete("/worker-list/{worker_id}/edit", response_model=WorkerListPage)
async def cancel_edit_form(
    worker_id: str,
    session: Session = Depends(require_session),  # noqa: B008
    view: WorkerListView = Depends(get_worker_list_view),  # noqa: B008
):
    if view.editing is not None and view.editing.worker_id == worker_id:
        view.cancel_edit()
    return view.render()


@router.put("/worker-list/{worker_id}", response_model=WorkerListPage)
async def edit_worker(
    worker_id: str,
    values: dict[str, str],
    response: Response,
    session: Session = Depends(require_session),  # noqa: B008
    view: WorkerListView = Depends(get_worker_list_view),  # noqa: B008
):
    """Submit an edit. Without an open edit form for this worker the request is one-shot."""
    _check_fields(values)
    opened = view.editing is not None and view.editing.worker_id == worker_id
    form = view.editing if opened else await view.start_edit(worker_id)
    if form is None:
        raise _not_found(worker_id)
    form.change_many(values)

    if await view.submit_edit():
        return view.render()

    response.status_code = status.HTTP_400_BAD_REQUEST
    page = view.render()
    if not opened:
        view.cancel_edit()
    return page


@router.post("/worker-list/{worker_id}/confirm-delete", response_model=WorkerListPage)
async def request_delete(
    worker_id: str,
    session: Session = Depends(require_session),  # noqa: B008
    view: WorkerListView = Depends(get_worker_list_view),  # noqa: B008
):
    if await view.load(worker_id) is None:
        raise _not_found(worker_id)
    view.request_delete(worker_id)
    return view.render()


@router.delete("/worker-list/{worker_id}/confirm-delete", response_model=WorkerListPage)
async def cancel_delete(
    worker_id: str,
    session: Session = Depends(require_session),  # noqa: B008
    view: WorkerListView = Depends(get_worker_list_view),  # noqa: B008
):
    if view.delete_confirm == worker_id:
        view.cancel_delete()
    return view.render()


@router.delete("/worker-list/{worker_id}", response_model=WorkerListPage)
async def delete_worker(
    worker_id: str,
    response: Response,
    session: Session = Depends(require_session),  # noqa: B008
    view: WorkerListView = Depends(get_worker_list_view),  # noqa: B008
):
    if view.delete_confirm != worker_id:
        logger.warning("Rejected unconfirmed deletion of worker %s", worker_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Deletion of worker '{worker_id}' was not confirmed",
        )
    if not await view.confirm_delete():
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return view.render()
