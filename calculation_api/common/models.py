"""Pydantic models for calculation requests and records."""
from pydantic import BaseModel, ConfigDict, Field


class CalculationRequest(BaseModel):
    """Body of a create or update request."""

    model_config = ConfigDict(extra="ignore")

    expression: str = Field(..., description="Arithmetic or boolean expression", examples=["3 * 4"])


class Calculation(BaseModel):
    """A stored expression with its evaluated result."""

    # Records are immutable, updates go through model_copy()
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(..., description="UUID assigned at creation")
    expression: str = Field(..., description="Original expression")
    result: str = Field(..., description="Canonical text of the evaluated result")


class ErrorResponse(BaseModel):
    """JSON body returned for every failed request."""

    error: str
