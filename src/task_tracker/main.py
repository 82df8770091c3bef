from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .context import build_context
from .identity import IdentityStore
from .logging_setup import setup_logger
from .routers import auth as auth_router
from .routers import dashboard as dashboard_router
from .routers import tasks as tasks_router
from .sessions import SessionRegistry
from .settings import Settings, get_settings
from .task_store import TaskStore

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "auth", "description": "Registration, login and session management."},
    {"name": "tasks", "description": "CRUD operations on the caller's tasks, with filtering and statistics."},
    {"name": "dashboard", "description": "Aggregated data for the dashboard page."},
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API around one explicit StoreContext.

    The identity store, task store and session registry are kept on
    ``app.state`` and handed to routes through dependencies.

    Log sinks are installed when the app starts serving, not when it is
    built, so importing this module leaves the host's loguru sinks alone.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logger(settings)
        logger.info("Task tracker ready backend={}", settings.persistence_backend)
        yield
        logger.info("Task tracker stopped")

    app = FastAPI(
        title="Task Tracker",
        description="Per-user task lists with accounts, persisted to whole-collection stores.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    context = build_context(settings)
    app.state.settings = settings
    app.state.identity_store = IdentityStore(context)
    app.state.task_store = TaskStore(context)
    app.state.sessions = SessionRegistry(settings.session_ttl_seconds)

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers for consistent JSON on validation errors
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_errors(exc),
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(auth_router.router)
    app.include_router(tasks_router.router)
    app.include_router(dashboard_router.router)

    logger.debug("Built task tracker app backend={}", settings.persistence_backend)
    return app


def jsonable_errors(exc: RequestValidationError):
    # ctx may carry the raw ValueError raised by a validator
    return jsonable_encoder(exc.errors(), custom_encoder={ValueError: str})


app = create_app()
