"""HTTP routes for the /calculations resource."""
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from calculation_api.common.models import Calculation, CalculationRequest, ErrorResponse
from calculation_api.server.service import CalculationService

router = APIRouter(prefix="/calculations", tags=["calculations"])

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}
ID_ERROR_RESPONSES = {**ERROR_RESPONSES, status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


def get_service(request: Request) -> CalculationService:
    """Return the service attached to the running application."""
    return request.app.state.calculation_service


@router.get("", response_model=List[Calculation], summary="Get all calculations")
def get_calculations(service: CalculationService = Depends(get_service)) -> List[Calculation]:
    return service.list()


@router.get(
    "/{calculation_id}",
    response_model=Calculation,
    responses=ID_ERROR_RESPONSES,
    summary="Get one calculation",
)
def get_calculation(calculation_id: str, service: CalculationService = Depends(get_service)) -> Calculation:
    return service.get_by_id(calculation_id)


@router.post(
    "",
    response_model=Calculation,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create calculation",
)
def post_calculation(
    body: CalculationRequest, service: CalculationService = Depends(get_service)
) -> Calculation:
    return service.create(body.expression)


@router.patch(
    "/{calculation_id}",
    response_model=Calculation,
    responses=ID_ERROR_RESPONSES,
    summary="Update calculation",
)
def patch_calculation(
    calculation_id: str,
    body: CalculationRequest,
    service: CalculationService = Depends(get_service),
) -> Calculation:
    return service.update(calculation_id, body.expression)


@router.delete(
    "/{calculation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=ERROR_RESPONSES,
    summary="Delete calculation",
)
def delete_calculation(calculation_id: str, service: CalculationService = Depends(get_service)) -> Response:
    service.delete(calculation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
