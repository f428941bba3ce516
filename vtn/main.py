"""
FastAPI Main Application
OpenADR VTN API Service
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from vtn import __version__
from vtn.api.router import api_router
from vtn.core.config import settings
from vtn.core.database import create_engine, create_session_factory, init_database
from vtn.core.errors import VtnError
from vtn.core.logging import setup_logging
from vtn.core.security import TokenManager
from vtn.data_source.base import DataSource
from vtn.data_source.memory import InMemoryDataSource
from vtn.data_source.sql import SqlDataSource
from vtn.middleware.request_context import RequestContextMiddleware
from vtn.schemas.base import Problem, format_errors
from vtn.services.bootstrap import ensure_bootstrap_credential_exists

# Setup structured logging
setup_logging()
logger = structlog.get_logger()

PROBLEM_MEDIA_TYPE = "application/problem+json"


async def create_data_source() -> DataSource:
    """Pick the storage backend from the environment"""
    if not settings.DATABASE_URL:
        logger.info("Using in-memory storage")
        return InMemoryDataSource()

    engine = create_engine(settings.DATABASE_URL)
    await init_database(engine)
    logger.info("Using SQL storage", dialect=engine.dialect.name)
    return SqlDataSource(create_session_factory(engine), engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting OpenADR VTN", version=__version__, environment=settings.ENVIRONMENT)

    if app.state.data_source is None:
        app.state.data_source = await create_data_source()
    await ensure_bootstrap_credential_exists(app.state.data_source.auth)

    yield

    logger.info("Shutting down OpenADR VTN")
    await app.state.data_source.close()


def problem_response(request: Request, status_code: int, title: str, detail: Optional[str], headers=None):
    problem = Problem(title=title, status=status_code, detail=detail, instance=request.url.path)
    return JSONResponse(
        status_code=status_code,
        content=problem.model_dump(exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


async def vtn_error_handler(request: Request, exc: VtnError):
    """Domain errors map one to one onto problem responses"""
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.detail)
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            method=request.method,
            status=exc.status_code,
            detail=exc.detail,
        )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return problem_response(request, exc.status_code, exc.title, exc.detail, headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Body, path and query validation failures are reported as 400"""
    detail = format_errors(exc.errors())
    logger.info("Request validation failed", path=request.url.path, detail=detail)
    return problem_response(request, 400, "Bad Request", detail)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return problem_response(request, exc.status_code, str(exc.detail), None, getattr(exc, "headers", None))


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )
    return problem_response(request, 500, "Internal Server Error", "An unexpected error occurred")


def create_app(
    data_source: Optional[DataSource] = None,
    token_manager: Optional[TokenManager] = None,
) -> FastAPI:
    """
    Create the FastAPI application

    Args:
        data_source: Storage backend; chosen from the settings on startup when omitted
        token_manager: Token issuer/verifier; built from the settings when omitted
    """
    app = FastAPI(
        title="OpenADR VTN",
        description="OpenADR 3 Virtual Top Node API",
        version=__version__,
        docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
        redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
        lifespan=lifespan,
    )

    app.state.data_source = data_source
    app.state.token_manager = token_manager or TokenManager.from_settings()

    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(VtnError, vtn_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "vtn.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower()
    )
