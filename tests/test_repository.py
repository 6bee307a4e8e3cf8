"""Test the SQL and in-memory calculation repositories against the same behaviours."""
from pathlib import Path
import threading

import pytest
from sqlalchemy.exc import OperationalError

from calculation_api.common.errors import CalculationNotFoundError, StorageError
from calculation_api.common.models import Calculation
from calculation_api.storage.database import init_db
from calculation_api.storage.repository import (
    CalculationRepository,
    InMemoryCalculationRepository,
    SqlCalculationRepository,
)

FIRST = Calculation(id="11111111-1111-1111-1111-111111111111", expression="2+2", result="4")
SECOND = Calculation(id="22222222-2222-2222-2222-222222222222", expression="3*4", result="12")


@pytest.fixture(params=["sql", "memory"])
def repository(request) -> CalculationRepository:
    """Each test runs against an in-memory SQLite repository and the dict-based one."""
    if request.param == "sql":
        return SqlCalculationRepository(init_db("sqlite://"))
    return InMemoryCalculationRepository()


def test_create_then_get(repository: CalculationRepository) -> None:
    """A created calculation can be read back by id."""
    repository.create(FIRST)
    assert repository.get_by_id(FIRST.id) == FIRST


def test_list_returns_all(repository: CalculationRepository) -> None:
    """list returns every stored calculation."""
    assert repository.list() == []
    repository.create(FIRST)
    repository.create(SECOND)
    assert sorted(repository.list(), key=lambda c: c.id) == [FIRST, SECOND]


def test_get_unknown_id_raises_not_found(repository: CalculationRepository) -> None:
    """get_by_id raises CalculationNotFoundError instead of returning an empty record."""
    with pytest.raises(CalculationNotFoundError):
        repository.get_by_id(FIRST.id)


def test_create_duplicate_id_raises_storage_error(repository: CalculationRepository) -> None:
    """Ids are unique."""
    repository.create(FIRST)
    with pytest.raises(StorageError):
        repository.create(FIRST.model_copy(update={"expression": "1+1", "result": "2"}))
    assert repository.get_by_id(FIRST.id) == FIRST


def test_update_replaces_expression_and_result(repository: CalculationRepository) -> None:
    """update overwrites expression and result for the same id."""
    repository.create(FIRST)
    updated = FIRST.model_copy(update={"expression": "5+5", "result": "10"})
    repository.update(updated)
    assert repository.get_by_id(FIRST.id) == updated
    assert len(repository.list()) == 1


def test_update_unknown_id_inserts(repository: CalculationRepository) -> None:
    """update saves a calculation whose id is not stored yet."""
    repository.update(SECOND)
    assert repository.get_by_id(SECOND.id) == SECOND


def test_delete_removes_calculation(repository: CalculationRepository) -> None:
    """delete removes the row and leaves the others."""
    repository.create(FIRST)
    repository.create(SECOND)
    repository.delete(FIRST.id)
    assert repository.list() == [SECOND]


def test_delete_unknown_id_is_not_an_error(repository: CalculationRepository) -> None:
    """Deleting an id that is not stored does nothing."""
    repository.delete(FIRST.id)
    assert repository.list() == []


def test_sql_repository_persists_across_session_factories(tmp_path: Path) -> None:
    """Rows written through one engine are visible to a new one on the same file."""
    url = f"sqlite:///{tmp_path / 'calculations.db'}"
    SqlCalculationRepository(init_db(url)).create(FIRST)
    assert SqlCalculationRepository(init_db(url)).list() == [FIRST]


class BrokenSession:
    """Session stand-in whose every database call fails."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    add = merge = execute = scalars = get = _fail


class BrokenSessionFactory:
    """sessionmaker stand-in handing out BrokenSession objects."""

    def __call__(self):
        return BrokenSession()

    def begin(self):
        return BrokenSession()


@pytest.mark.parametrize("operation,args", [
    ("create", (FIRST,)),
    ("list", ()),
    ("get_by_id", (FIRST.id,)),
    ("update", (FIRST,)),
    ("delete", (FIRST.id,)),
])
def test_sql_repository_wraps_driver_errors(operation: str, args: tuple) -> None:
    """Database failures surface as StorageError."""
    repository = SqlCalculationRepository(BrokenSessionFactory())
    with pytest.raises(StorageError):
        getattr(repository, operation)(*args)


def test_in_memory_repository_concurrent_creates() -> None:
    """Concurrent writers do not lose records."""
    repository = InMemoryCalculationRepository()

    def create_many(prefix: int) -> None:
        for n in range(50):
            calc_id = f"{prefix:08d}-0000-0000-0000-{n:012d}"
            repository.create(Calculation(id=calc_id, expression="1+1", result="2"))

    threads = [threading.Thread(target=create_many, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(repository.list()) == 400
