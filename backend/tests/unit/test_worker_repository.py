from __future__ import annotations

from datetime import date

import pytest
from postgrest.exceptions import APIError

from registry.core.config import Settings
from registry.core.errors import ErrorCode, RepositoryError
from registry.models.worker import Department, EducationLevel, Gender, Worker, WorkerFormData, WorkerUpdate
from registry.services.worker_repository import WorkerRepository
from tests.conftest import TEST_USER_ID, FakeSupabaseClient, worker_row


def _form(**overrides) -> WorkerFormData:
    data = {
        "nom": "Ilunga",
        "postnom": "Kasongo",
        "prenom": "Paul",
        "telephone": "+243 99 111 2222",
        "departement": Department.LOGISTIQUE,
        "sexe": Gender.MASCULIN,
        "niveau_etudes": EducationLevel.G3,
        "date_adhesion": date(2024, 1, 15),
    }
    data.update(overrides)
    return WorkerFormData(**data)


@pytest.mark.anyio
async def test_list_returns_newest_first(repository):
    workers = await repository.list_workers()

    assert [w.nom for w in workers] == ["Kalonji", "Mbuyi"]
    assert all(isinstance(w, Worker) for w in workers)


@pytest.mark.anyio
async def test_list_filters_by_department(repository):
    workers = await repository.list_workers(Department.FINANCE)
    assert [w.nom for w in workers] == ["Mbuyi"]


@pytest.mark.anyio
async def test_list_builds_ordered_department_query(repository, fake_supabase):
    await repository.list_workers(Department.INFORMATIQUE)

    call = fake_supabase.workers.calls[-1]
    assert call["action"] == "select"
    assert call["order"] == ("created_at", True)
    assert call["filters"] == [("departement", "Informatique")]
    assert fake_supabase.requested_tables == ["travailleurs"]


@pytest.mark.anyio
async def test_list_without_department_has_no_filter(repository, fake_supabase):
    await repository.list_workers()
    assert fake_supabase.workers.calls[-1]["filters"] == []


@pytest.mark.anyio
async def test_list_store_failure_raises_repository_error(repository, fake_supabase):
    fake_supabase.workers.error = APIError({"message": "connection refused", "code": "500"})

    with pytest.raises(RepositoryError) as exc_info:
        await repository.list_workers()

    assert exc_info.value.code is ErrorCode.LIST_FAILED
    assert exc_info.value.message == "Erreur lors du chargement des travailleurs"


@pytest.mark.anyio
async def test_list_malformed_row_raises_repository_error():
    client = FakeSupabaseClient([worker_row("w-bad", "Bad", "Not a department", "2024-01-01T00:00:00+00:00")])
    repo = WorkerRepository()
    await repo.initialize(client, Settings())

    with pytest.raises(RepositoryError):
        await repo.list_workers()


@pytest.mark.anyio
async def test_insert_sets_creator_and_uses_server_defaults(repository, fake_supabase):
    worker = await repository.insert_worker(_form(), creator=TEST_USER_ID)

    assert worker.id.startswith("w-new-")
    assert worker.created_by == TEST_USER_ID
    assert worker.created_at is not None
    payload = fake_supabase.workers.calls[-1]["payload"]
    assert "id" not in payload
    assert "created_at" not in payload
    assert payload["departement"] == "Logistique"
    assert payload["date_adhesion"] == "2024-01-15"


@pytest.mark.anyio
async def test_inserted_worker_is_listed_first(repository):
    await repository.insert_worker(_form(), creator=TEST_USER_ID)
    workers = await repository.list_workers()
    assert workers[0].nom == "Ilunga"


@pytest.mark.anyio
async def test_insert_failure_raises_repository_error(repository, fake_supabase):
    fake_supabase.workers.error = APIError({"message": "duplicate key", "code": "23505"})

    with pytest.raises(RepositoryError) as exc_info:
        await repository.insert_worker(_form(), creator=TEST_USER_ID)

    assert exc_info.value.code is ErrorCode.INSERT_FAILED
    assert "duplicate key" in exc_info.value.message


@pytest.mark.anyio
async def test_update_only_sends_mutable_fields(repository, fake_supabase):
    await repository.update_worker("w-mbuyi", WorkerUpdate(telephone="+243 82 000 0001"))

    call = fake_supabase.workers.calls[-1]
    assert call["action"] == "update"
    assert call["payload"] == {"telephone": "+243 82 000 0001"}
    assert call["filters"] == [("id", "w-mbuyi")]

    updated = await repository.get_worker("w-mbuyi")
    assert updated.telephone == "+243 82 000 0001"
    assert updated.created_by == TEST_USER_ID


@pytest.mark.anyio
async def test_update_with_no_fields_skips_round_trip(repository, fake_supabase):
    await repository.update_worker("w-mbuyi", WorkerUpdate())
    assert fake_supabase.workers.calls == []


@pytest.mark.anyio
async def test_update_failure_raises_repository_error(repository, fake_supabase):
    fake_supabase.workers.error = APIError({"message": "timeout", "code": "57014"})
    with pytest.raises(RepositoryError) as exc_info:
        await repository.update_worker("w-mbuyi", WorkerUpdate(nom="X"))
    assert exc_info.value.code is ErrorCode.UPDATE_FAILED


@pytest.mark.anyio
async def test_delete_removes_worker_from_next_list(repository):
    await repository.delete_worker("w-kalonji")
    workers = await repository.list_workers()
    assert [w.nom for w in workers] == ["Mbuyi"]


@pytest.mark.anyio
async def test_delete_failure_raises_repository_error(repository, fake_supabase):
    fake_supabase.workers.error = APIError({"message": "forbidden", "code": "42501"})
    with pytest.raises(RepositoryError) as exc_info:
        await repository.delete_worker("w-kalonji")
    assert exc_info.value.code is ErrorCode.DELETE_FAILED


@pytest.mark.anyio
async def test_get_worker_found_and_missing(repository):
    assert (await repository.get_worker("w-mbuyi")).nom == "Mbuyi"
    assert await repository.get_worker("w-unknown") is None


@pytest.mark.anyio
async def test_not_initialized_repository_raises_not_configured():
    repo = WorkerRepository()
    await repo.initialize(None, Settings())

    assert repo.initialized is False
    with pytest.raises(RepositoryError) as exc_info:
        await repo.list_workers()
    assert exc_info.value.code is ErrorCode.NOT_CONFIGURED


@pytest.mark.anyio
async def test_check_connection(repository, fake_supabase):
    assert await repository.check_connection() is True

    fake_supabase.workers.error = APIError({"message": "down", "code": "500"})
    assert await repository.check_connection() is False


@pytest.mark.anyio
async def test_check_connection_not_initialized():
    assert await WorkerRepository().check_connection() is False


@pytest.mark.anyio
async def test_initialize_uses_configured_table():
    client = FakeSupabaseClient()
    repo = WorkerRepository()
    await repo.initialize(client, Settings(WORKERS_TABLE="workers"))

    await repo.list_workers()

    assert client.requested_tables == ["workers"]
