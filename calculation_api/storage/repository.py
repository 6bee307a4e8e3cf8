"""Calculation repositories: a relational one and an in-memory one."""
from abc import ABC, abstractmethod
import threading
from typing import Dict, List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from calculation_api.common.errors import CalculationNotFoundError, StorageError
from calculation_api.common.logger import logger
from calculation_api.common.models import Calculation
from calculation_api.storage.orm import CalculationRecord


class CalculationRepository(ABC):
    """CRUD operations over stored calculations, keyed by id."""

    @abstractmethod
    def create(self, calculation: Calculation) -> None:
        """Insert a new calculation."""

    @abstractmethod
    def list(self) -> List[Calculation]:
        """Return every calculation, in no particular order."""

    @abstractmethod
    def get_by_id(self, calculation_id: str) -> Calculation:
        """Return one calculation or raise CalculationNotFoundError."""

    @abstractmethod
    def update(self, calculation: Calculation) -> None:
        """Save expression and result for the calculation's id, inserting it if missing."""

    @abstractmethod
    def delete(self, calculation_id: str) -> None:
        """Remove a calculation; unknown ids are ignored."""


class SqlCalculationRepository(CalculationRepository):
    """
    Repository backed by a relational database through SQLAlchemy.

    Each operation runs in its own session and transaction. Driver and query
    failures are raised as StorageError.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def create(self, calculation: Calculation) -> None:
        try:
            with self._session_factory.begin() as session:
                session.add(CalculationRecord(**calculation.model_dump()))
        except SQLAlchemyError as exc:
            logger.error("Could not insert calculation %s: %s", calculation.id, exc)
            raise StorageError("could not create calculation") from exc

    def list(self) -> List[Calculation]:
        try:
            with self._session_factory() as session:
                records = session.scalars(select(CalculationRecord)).all()
                return [Calculation.model_validate(record) for record in records]
        except SQLAlchemyError as exc:
            logger.error("Could not list calculations: %s", exc)
            raise StorageError("could not get calculations") from exc

    def get_by_id(self, calculation_id: str) -> Calculation:
        try:
            with self._session_factory() as session:
                record = session.get(CalculationRecord, calculation_id)
                if record is None:
                    raise CalculationNotFoundError(calculation_id)
                return Calculation.model_validate(record)
        except SQLAlchemyError as exc:
            logger.error("Could not load calculation %s: %s", calculation_id, exc)
            raise StorageError("could not get calculation") from exc

    def update(self, calculation: Calculation) -> None:
        try:
            with self._session_factory.begin() as session:
                # merge() updates the row with this primary key or inserts it
                session.merge(CalculationRecord(**calculation.model_dump()))
        except SQLAlchemyError as exc:
            logger.error("Could not save calculation %s: %s", calculation.id, exc)
            raise StorageError("could not update calculation") from exc

    def delete(self, calculation_id: str) -> None:
        try:
            with self._session_factory.begin() as session:
                session.execute(delete(CalculationRecord).where(CalculationRecord.id == calculation_id))
        except SQLAlchemyError as exc:
            logger.error("Could not delete calculation %s: %s", calculation_id, exc)
            raise StorageError("could not delete calculation") from exc


class InMemoryCalculationRepository(CalculationRepository):
    """
    Repository keeping calculations in a process-wide dictionary.

    Records live only as long as the process. A lock serialises access from
    the server's worker threads.
    """

    def __init__(self) -> None:
        self._calculations: Dict[str, Calculation] = {}
        self._lock = threading.Lock()

    def create(self, calculation: Calculation) -> None:
        with self._lock:
            if calculation.id in self._calculations:
                raise StorageError(f"calculation {calculation.id} already exists")
            self._calculations[calculation.id] = calculation

    def list(self) -> List[Calculation]:
        with self._lock:
            return list(self._calculations.values())

    def get_by_id(self, calculation_id: str) -> Calculation:
        with self._lock:
            try:
                return self._calculations[calculation_id]
            except KeyError:
                raise CalculationNotFoundError(calculation_id) from None

    def update(self, calculation: Calculation) -> None:
        with self._lock:
            self._calculations[calculation.id] = calculation

    def delete(self, calculation_id: str) -> None:
        with self._lock:
            self._calculations.pop(calculation_id, None)
