"""Onboarding Wizard: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# Logging is configured ahead of the remaining imports so module-level
# structlog loggers bind to the final processor chain.
from onboarding_wizard.core.config import get_settings
from onboarding_wizard.core.logging import configure_structlog

configure_structlog(
    log_level="DEBUG" if get_settings().debug else "INFO",
    json_logs=not get_settings().debug,
)

import structlog

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from onboarding_wizard.api.routes import api_router
from onboarding_wizard.core.exceptions import OnboardingError
from onboarding_wizard.db import create_engine, create_redis, create_session_factory, create_tables
from onboarding_wizard.domain.questionnaire import QuestionCatalog
from onboarding_wizard.middleware.correlation import get_correlation_id, setup_correlation_middleware

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the session store and profile database for the app's lifetime."""
    settings = get_settings()
    app.state.shutting_down = False

    def drain(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", health="503")

    signal.signal(signal.SIGTERM, drain)
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    app.state.catalog = QuestionCatalog()
    app.state.engine = create_engine(settings.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    await create_tables(app.state.engine)
    app.state.redis = await create_redis(settings.redis_url)
    logger.info(
        "startup_complete",
        total_questions=app.state.catalog.total_count,
        session_ttl_seconds=settings.session_ttl_seconds,
    )

    try:
        yield
    finally:
        await app.state.redis.aclose()
        await app.state.engine.dispose()
        logger.info("shutdown_complete")


def _error_response(request: Request, event: str, status_code: int, body: dict, exc: Exception) -> JSONResponse:
    """Log ``exc`` under a fresh debug_id and return ``body`` with that id attached."""
    debug_id = str(uuid.uuid4())
    log = logger.warning if status_code < 500 else logger.error
    log(
        event,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        method=request.method,
        path=request.url.path,
        status_code=status_code,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc if status_code >= 500 else None,
    )
    return JSONResponse(status_code=status_code, content={**body, "debug_id": debug_id})


async def onboarding_exception_handler(request: Request, exc: OnboardingError) -> JSONResponse:
    # Store and consistency failures: the client only sees the public message
    return _error_response(request, "onboarding_error", 500, {"error": exc.public_message}, exc)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, "http_exception", exc.status_code, {"detail": exc.detail}, exc)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(request, "unhandled_exception", 500, {"detail": "Internal server error"}, exc)


def create_app() -> FastAPI:
    """Build the application: CORS, request ids, error handlers and the /api routes."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Conversational onboarding wizard for the developer community",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(dict.fromkeys([settings.frontend_url, *settings.cors_origins])),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    # Outermost, so the request id exists before CORS and the routes run
    setup_correlation_middleware(app)

    app.add_exception_handler(OnboardingError, onboarding_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("onboarding_wizard.main:app", host="0.0.0.0", port=8000, reload=get_settings().debug)
