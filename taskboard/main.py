"""
Taskboard

FastAPI application entry point.
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.config import get_settings
from taskboard.database import close_db, init_db, task_session_maker
from taskboard.errors import InvalidArgument, ServiceError
from taskboard.api.v1 import router as api_v1_router
from taskboard.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from taskboard.kernel.events.outbox import get_outbox_relay
from taskboard.kernel.events.topic import board_deleted_topic
from taskboard.kernel.tasks.cascade import register_task_subscriptions
from taskboard.schemas.common import HealthResponse
from taskboard.logging_config import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    # Configure logging first
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
        service=settings.project_name,
    )

    # Startup
    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")

    register_task_subscriptions(board_deleted_topic, task_session_maker)

    relay_task = None
    if settings.outbox_relay_enabled:
        relay_task = asyncio.create_task(get_outbox_relay().run())

    yield

    # Shutdown
    logger.info("Shutting down...")
    if relay_task is not None:
        relay_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await relay_task
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.project_name,
    description="""
    Taskboard

    Multi-user boards with role-based membership and tasks.

    ## Features

    - **Accounts**: Email/password signup and bearer-token login
    - **Boards**: Admin/Member/Viewer roles, invitations, member removal
    - **Tasks**: Per-board tasks moved through To Do, In Progress and Done

    ## Invariants

    1. Every board has exactly one Admin
    2. Invitations resolve once
    3. Deleting a board removes its tasks
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# add_middleware stacks innermost-first: the last one added is outermost.
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_HTTP_CODES = {
    status.HTTP_401_UNAUTHORIZED: "unauthenticated",
    status.HTTP_403_FORBIDDEN: "permission_denied",
    status.HTTP_404_NOT_FOUND: "not_found",
}


def _error_response(
    request: Request,
    status_code: int,
    content: dict,
    headers: Optional[dict] = None,
) -> JSONResponse:
    headers = dict(headers or {})
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers[REQUEST_ID_HEADER] = req_id
        if status_code >= 500:
            content["request_id"] = req_id
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Map the service error taxonomy onto HTTP."""
    if exc.status_code >= 500:
        logger.error(
            "Service error: %s",
            exc.message,
            exc_info=exc.__cause__,
            extra={"code": exc.code, "path": request.url.path},
        )
    headers = {}
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers["WWW-Authenticate"] = "Bearer"
    return _error_response(
        request,
        exc.status_code,
        {"detail": exc.message, "code": exc.code},
        headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown routes, wrong methods and the like."""
    code = _HTTP_CODES.get(exc.status_code)
    if code is None:
        code = "internal" if exc.status_code >= 500 else "invalid_argument"
    return _error_response(
        request,
        exc.status_code,
        {"detail": exc.detail, "code": code},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Malformed bodies and path parameters are invalid arguments."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    return _error_response(
        request,
        InvalidArgument.status_code,
        {"detail": "Validation error", "code": InvalidArgument.code, "errors": errors},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error: %s", exc)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"detail": "Internal server error", "code": "internal"},
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    content = {"detail": "Internal server error", "code": "internal"}
    if settings.debug:
        content["detail"] = str(exc)
        content["type"] = type(exc).__name__
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, content)


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(status="ok", version=settings.version)


# Mount API routes
app.include_router(
    api_v1_router,
    prefix=settings.api_prefix,
)


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "taskboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
