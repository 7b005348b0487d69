"""
FastAPI application factory and configuration
"""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..logging_config import bind_request_context, configure_logging
from ..routes import assistant_router, intel_router, leaders_router, places_router, query_router
from ..services.grounded_query import GroundedQueryExecutor
from ..services.intelligence import IntelligenceService
from .config import ENABLE_API_DOCS, GEMINI_MODEL, TRUSTED_ORIGINS, ProviderCredentials
from .error_handlers import register_error_handlers

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    logger.info("Starting Accountable India API", version=__version__)

    if getattr(app.state, "executor", None) is None:
        credentials = ProviderCredentials.from_env()
        missing = [name for name, ok in credentials.configured().items() if not ok]
        if missing:
            logger.warning("Provider credentials missing", providers=missing)
        app.state.executor = GroundedQueryExecutor.from_credentials(
            credentials, default_model=GEMINI_MODEL
        )
    if getattr(app.state, "intelligence", None) is None:
        app.state.intelligence = IntelligenceService(app.state.executor)
    logger.info("Grounded query executor ready", default_model=app.state.executor.default_model)

    yield

    logger.info("Shutdown complete")


def create_app(executor: Optional[GroundedQueryExecutor] = None) -> FastAPI:
    """Create and configure FastAPI application.

    ``executor`` replaces the one built from environment credentials at
    startup; the intelligence service is derived from it.
    """
    configure_logging()

    app = FastAPI(
        title="Accountable India API",
        version=__version__,
        description="Grounded civic intelligence with search-backed fallback",
        lifespan=lifespan,
        docs_url="/docs" if ENABLE_API_DOCS else None,
        redoc_url="/redoc" if ENABLE_API_DOCS else None,
    )
    app.state.executor = executor
    app.state.intelligence = IntelligenceService(executor) if executor is not None else None

    setup_middleware(app)
    setup_routes(app)
    register_error_handlers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure middleware"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=TRUSTED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Request-ID"],
        max_age=600,
    )

    # Request ID middleware
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        bind_request_context(request_id=request_id, path=request.url.path)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def setup_routes(app: FastAPI):
    """Configure routes"""
    # Business routes live under /v1
    app.include_router(query_router, prefix="/v1")
    app.include_router(intel_router, prefix="/v1")
    app.include_router(leaders_router, prefix="/v1")
    app.include_router(places_router, prefix="/v1")
    app.include_router(assistant_router, prefix="/v1")

    @app.get("/health", tags=["system"])
    async def health(request: Request):
        executor = getattr(request.app.state, "executor", None)
        return {
            "status": "ok" if executor is not None else "starting",
            "version": __version__,
            "default_model": getattr(executor, "default_model", None),
        }
