"""Business logic tying the evaluator, identifier checks and repository together."""
from typing import Callable, List
import uuid

from calculation_api.common.errors import InvalidIdError
from calculation_api.common.evaluator import ExpressionEvaluator
from calculation_api.common.identifiers import is_valid_id
from calculation_api.common.logger import logger
from calculation_api.common.models import Calculation
from calculation_api.storage.repository import CalculationRepository


def new_id() -> str:
    """Return a random UUID4 as text."""
    return str(uuid.uuid4())


class CalculationService:
    """
    Create, read, update and delete calculations.

    Expressions are evaluated before anything is written, so a failed
    evaluation never touches stored state. Errors from the evaluator and the
    repository propagate unchanged to the caller.
    """

    def __init__(
        self,
        repository: CalculationRepository,
        evaluator: Callable[[str], str] = ExpressionEvaluator.evaluate,
        id_factory: Callable[[], str] = new_id,
    ):
        self.repository = repository
        self._evaluate = evaluator
        self._new_id = id_factory

    @staticmethod
    def _check_id(calculation_id: str) -> None:
        if not is_valid_id(calculation_id):
            raise InvalidIdError(calculation_id)

    def create(self, expression: str) -> Calculation:
        """
        Evaluate an expression and store it under a new id.

        :param str expression: Expression to evaluate

        :return: The stored calculation
        :rtype: Calculation
        :raises InvalidExpressionError: If the expression cannot be evaluated
        :raises StorageError: If the record cannot be stored
        """
        result = self._evaluate(expression)
        calculation = Calculation(id=self._new_id(), expression=expression, result=result)
        self.repository.create(calculation)
        logger.info("🧮✅ Created calculation %s: %s = %s", calculation.id, expression, result)
        return calculation

    def list(self) -> List[Calculation]:
        """Return all stored calculations."""
        return self.repository.list()

    def get_by_id(self, calculation_id: str) -> Calculation:
        """
        Return one calculation.

        :param str calculation_id: Calculation id

        :return: The stored calculation
        :rtype: Calculation
        :raises InvalidIdError: If the id is malformed
        :raises CalculationNotFoundError: If no calculation has this id
        """
        self._check_id(calculation_id)
        return self.repository.get_by_id(calculation_id)

    def update(self, calculation_id: str, expression: str) -> Calculation:
        """
        Replace the expression of a calculation and recompute its result.

        The id is kept. Nothing is saved unless the new expression evaluates.

        :param str calculation_id: Calculation id
        :param str expression: New expression

        :return: The updated calculation
        :rtype: Calculation
        :raises InvalidIdError: If the id is malformed
        :raises CalculationNotFoundError: If no calculation has this id
        :raises InvalidExpressionError: If the new expression cannot be evaluated
        :raises StorageError: If the record cannot be saved
        """
        self._check_id(calculation_id)
        current = self.repository.get_by_id(calculation_id)
        result = self._evaluate(expression)
        updated = current.model_copy(update={"expression": expression, "result": result})
        self.repository.update(updated)
        logger.info("🧮🔁 Updated calculation %s: %s = %s", calculation_id, expression, result)
        return updated

    def delete(self, calculation_id: str) -> None:
        """
        Delete a calculation. Unknown ids are not an error.

        :param str calculation_id: Calculation id
        :raises InvalidIdError: If the id is malformed
        """
        self._check_id(calculation_id)
        self.repository.delete(calculation_id)
        logger.info("🧮🗑️ Deleted calculation %s", calculation_id)
