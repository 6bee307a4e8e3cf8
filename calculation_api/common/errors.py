"""Errors raised by the calculation service, each mapped to an HTTP status code."""


class CalculationError(Exception):
    """Base class for all calculation service errors."""

    status_code: int = 500


class InvalidExpressionError(CalculationError):
    """The expression could not be parsed or evaluated."""

    status_code = 400


class InvalidIdError(CalculationError):
    """The identifier does not look like a UUID."""

    status_code = 400

    def __init__(self, calculation_id: str):
        super().__init__(f"invalid id {calculation_id}")
        self.calculation_id = calculation_id


class CalculationNotFoundError(CalculationError):
    """No calculation is stored under the identifier."""

    status_code = 404

    def __init__(self, calculation_id: str):
        super().__init__(f"calculation {calculation_id} not found")
        self.calculation_id = calculation_id


class StorageError(CalculationError):
    """The underlying store failed to complete an operation."""

    status_code = 500
