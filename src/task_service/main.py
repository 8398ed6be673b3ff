"""
Task Service - Main application entry point
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_service.config import settings
from task_service.db import AsyncSessionLocal, Base, engine
from task_service.dependencies import authenticate, bearer_scheme, get_token_verifier
from task_service.exceptions import (
    INTERNAL_ERROR_DETAIL,
    AuthenticationFailure,
    StorageFailure,
    TaskServiceError,
)
from task_service.logging_config import LoggingMiddleware, logger, setup_logging
from task_service.routers.health_routes import SERVICE_VERSION
from task_service.routers.health_routes import router as health_router
from task_service.routers.task_routes import router as task_router
from task_service.routers.user_routes import router as user_router

JSON_INVALID = "json_invalid"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager."""
    logger.info("Application startup sequence initiated.")

    if settings.is_sqlite:
        # Local SQLite databases are not managed by Alembic.
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("SQLite schema ensured.")

    # Perform a quick database connection test on startup.
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        logger.info("Database connection successful.")
    except Exception as e:
        logger.error(f"Database connection failed on startup: {e}", exc_info=True)

    logger.info("Application startup complete.")
    yield
    logger.info("Application shutdown sequence initiated.")
    await engine.dispose()
    logger.info("Application shutdown complete.")


app = FastAPI(
    title="Task Service API",
    description="Per-user task tracking. Every task operation is scoped to the owner identified by the bearer token.",
    version=SERVICE_VERSION,
    root_path=settings.ROOT_PATH,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Tasks", "description": "Create, read, update and delete the caller's tasks."},
        {"name": "Users", "description": "Information about the authenticated caller."},
        {"name": "Health", "description": "Service health checks."},
    ],
)

# Request logging must sit inside the request-id middleware (added in setup_logging)
# so log lines carry the request id.
app.add_middleware(LoggingMiddleware)

# Setup logging configuration
setup_logging(app)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include Routers
app.include_router(health_router)
app.include_router(task_router)
app.include_router(user_router)


# Exception handlers
@app.exception_handler(TaskServiceError)
async def task_service_error_handler(request: Request, exc: TaskServiceError):
    return _task_service_error_response(request, exc)


def _task_service_error_response(request: Request, exc: TaskServiceError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationFailure):
        headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, StorageFailure):
        logger.error(f"Storage failure on {request.method} {request.url.path}")
    else:
        logger.info(
            f"{exc.__class__.__name__} on {request.method} {request.url.path}: "
            f"{exc.status_code}"
        )
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.detail}, headers=headers
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.error(f"HTTPException: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def _format_validation_errors(errors) -> str:
    messages = []
    for err in errors:
        if err.get("type") == JSON_INVALID:
            # The location of a decode error is a character offset, not a field
            messages.append("Request body is not valid JSON")
            continue
        # Drop the leading "body"/"path"/"query" location marker
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query")]
        field = ".".join(loc)
        messages.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(messages) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"ValidationError: {exc.errors()}")
    if any(err.get("type") == JSON_INVALID for err in exc.errors()):
        # Bodies are decoded before dependencies run, so the token is checked here
        try:
            authenticate(await bearer_scheme(request), get_token_verifier())
        except AuthenticationFailure as auth_exc:
            return _task_service_error_response(request, auth_exc)
    return JSONResponse(
        status_code=400, content={"detail": _format_validation_errors(exc.errors())}
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_DETAIL})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_DETAIL})
