"""FastAPI application factory."""
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from calculation_api.common.errors import CalculationError
from calculation_api.common.logger import logger
from calculation_api.server.handlers import router
from calculation_api.server.service import CalculationService

API_TITLE = "Calculation API"
API_VERSION = "1.0.0"


async def handle_calculation_error(request: Request, exc: CalculationError) -> JSONResponse:
    """Turn a service error into its status code and an error body."""
    if exc.status_code >= 500:
        logger.error("❌ %s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("⚠️ %s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def handle_invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject unparseable or mis-shaped request bodies with 400."""
    logger.warning("⚠️ %s %s invalid request body: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "invalid request"})


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Give routing errors such as 404 and 405 the same error body as the service."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def create_app(service: CalculationService) -> FastAPI:
    """
    Build the HTTP application around a calculation service.

    :param CalculationService service: Service used by every route

    :return: Configured FastAPI application
    :rtype: FastAPI
    """
    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        description="Simple calculator API storing expressions and their results",
    )
    app.state.calculation_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms
        )
        return response

    app.add_exception_handler(CalculationError, handle_calculation_error)
    app.add_exception_handler(RequestValidationError, handle_invalid_request)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.include_router(router)
    return app
