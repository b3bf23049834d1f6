"""Supabase-backed worker repository."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError
from supabase import AsyncClient

from registry.core.config import Settings
from registry.core.errors import ErrorCode, RepositoryError
from registry.models.worker import Department, Worker, WorkerFormData, WorkerUpdate

logger = logging.getLogger(__name__)

_STORE_ERRORS = (APIError, httpx.HTTPError, ValidationError)


class WorkerRepository:
    def __init__(self) -> None:
        self.client: AsyncClient | None = None
        self.table_name: str = "travailleurs"
        self.initialized: bool = False

    async def initialize(self, client: AsyncClient | None, settings: Settings) -> None:
        if self.initialized:
            return

        if client is None:
            logger.warning("Supabase client missing — WorkerRepository not initialized")
            return

        self.client = client
        self.table_name = settings.WORKERS_TABLE
        self.initialized = True
        logger.info("WorkerRepository initialized (table=%s)", self.table_name)

    async def close(self) -> None:
        self.client = None
        self.initialized = False

    def _table(self) -> Any:
        if self.client is None:
            raise RepositoryError(ErrorCode.NOT_CONFIGURED, "Base de données non configurée")
        return self.client.table(self.table_name)

    async def list_workers(self, department: Department | None = None) -> list[Worker]:
        """Workers newest-created first, optionally limited to one department."""
        try:
            query = self._table().select("*").order("created_at", desc=True)
            if department is not None:
                query = query.eq("departement", Department(department).value)
            response = await query.execute()
            return [Worker.model_validate(row) for row in response.data or []]
        except _STORE_ERRORS as e:
            logger.exception("Failed to list workers (department=%s)", department)
            raise RepositoryError(
                ErrorCode.LIST_FAILED, "Erreur lors du chargement des travailleurs"
            ) from e

    async def get_worker(self, worker_id: str) -> Worker | None:
        try:
            response = await self._table().select("*").eq("id", worker_id).limit(1).execute()
            rows = response.data or []
            return Worker.model_validate(rows[0]) if rows else None
        except _STORE_ERRORS as e:
            logger.exception("Failed to get worker %s", worker_id)
            raise RepositoryError(ErrorCode.GET_FAILED, "Erreur lors du chargement du travailleur") from e

    async def insert_worker(self, record: WorkerFormData, creator: str) -> Worker:
        # id and created_at come from the table defaults
        payload = {**record.model_dump(mode="json"), "created_by": creator}
        try:
            response = await self._table().insert(payload).execute()
            rows = response.data or []
            if not rows:
                raise RepositoryError(ErrorCode.INSERT_FAILED, "Aucune ligne retournée par l'insertion")
            worker = Worker.model_validate(rows[0])
        except _STORE_ERRORS as e:
            logger.exception("Failed to insert worker %s %s", record.nom, record.prenom)
            raise RepositoryError(ErrorCode.INSERT_FAILED, str(getattr(e, "message", None) or e)) from e

        logger.info("Inserted worker %s (created_by=%s)", worker.id, creator)
        return worker

    async def update_worker(self, worker_id: str, fields: WorkerUpdate) -> None:
        payload = fields.model_dump(mode="json", exclude_none=True)
        if not payload:
            logger.debug("Nothing to update for worker %s", worker_id)
            return
        try:
            await self._table().update(payload).eq("id", worker_id).execute()
        except _STORE_ERRORS as e:
            logger.exception("Failed to update worker %s", worker_id)
            raise RepositoryError(ErrorCode.UPDATE_FAILED, "Erreur lors de la modification") from e
        logger.info("Updated worker %s (%s)", worker_id, ", ".join(sorted(payload)))

    async def delete_worker(self, worker_id: str) -> None:
        try:
            await self._table().delete().eq("id", worker_id).execute()
        except _STORE_ERRORS as e:
            logger.exception("Failed to delete worker %s", worker_id)
            raise RepositoryError(ErrorCode.DELETE_FAILED, "Erreur lors de la suppression") from e
        logger.info("Deleted worker %s", worker_id)

    async def check_connection(self) -> bool:
        if not self.initialized:
            return False
        try:
            await self._table().select("id").limit(1).execute()
            return True
        except Exception:
            logger.exception("Supabase connection check failed")
            return False
