"""Onboarding API routes: conversation turns, back navigation, restart and retry-save."""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from onboarding_wizard.core.config import get_settings
from onboarding_wizard.core.exceptions import SessionStoreError
from onboarding_wizard.domain.paths import PathDeterminer
from onboarding_wizard.domain.questionnaire import QuestionCatalog
from onboarding_wizard.schemas.onboarding import (
    BackRequest,
    BackResponse,
    RestartResponse,
    RetrySaveRequest,
    RetrySaveResponse,
    TurnRequest,
    TurnResponse,
)
from onboarding_wizard.services.onboarding_service import OnboardingService
from onboarding_wizard.services.profile_persistence import ProfileRepository
from onboarding_wizard.services.session_store import SessionStore

logger = structlog.get_logger(__name__)

router = APIRouter()


def get_onboarding_service(request: Request) -> OnboardingService:
    """Dependency that builds the OnboardingService from clients created in the lifespan.

    Override this dependency in tests via app.dependency_overrides.
    """
    settings = get_settings()
    state = request.app.state

    catalog = getattr(state, "catalog", None) or QuestionCatalog()
    store = SessionStore(state.redis, ttl=settings.session_ttl_seconds)
    repository = ProfileRepository(
        state.session_factory,
        max_attempts=settings.save_max_attempts,
        base_delay=settings.save_base_delay_seconds,
        timeout=settings.save_timeout_seconds,
    )
    return OnboardingService(store, catalog, repository, PathDeterminer(settings.path_urls()))


@router.post("/message", response_model=TurnResponse, response_model_exclude_none=True)
async def post_message(
    request: TurnRequest,
    service: OnboardingService = Depends(get_onboarding_service),
):
    """Process one conversation turn.

    Args:
        request: TurnRequest with session id, raw response and optional conditional text
        service: OnboardingService (injected)

    Returns:
        TurnResponse; validation problems and expiry are reported in ``error``
    """
    return await service.handle_turn(request.session_id, request.response, request.conditional_text)


@router.get("/message")
async def check_message_service(service: OnboardingService = Depends(get_onboarding_service)):
    """Connectivity self-check: round-trips a throwaway session through the store."""
    try:
        connected = await service.check_services()
    except SessionStoreError as e:
        logger.error("service_check_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "status": "ERROR",
                "message": "API running. Error testing service connections.",
            },
        )

    if not connected:
        logger.error("service_check_session_missing")
        return JSONResponse(
            status_code=500,
            content={
                "status": "ERROR",
                "message": "API running. Session Service failed post-create check.",
            },
        )

    return {
        "status": "OK",
        "message": "API running. Session Service connected.",
        "services": ["Session (Redis)", "Database (PostgreSQL)"],
    }


@router.post("/back", response_model=BackResponse)
async def go_back(
    request: BackRequest,
    service: OnboardingService = Depends(get_onboarding_service),
):
    """Rewind a session to an earlier question.

    Raises:
        HTTPException(400): If the session id is missing or the index is invalid
        HTTPException(404): If the session does not exist
    """
    await service.go_back(request.session_id, request.target_question_index)
    return BackResponse(success=True)


@router.post("/restart", response_model=RestartResponse)
async def restart(service: OnboardingService = Depends(get_onboarding_service)):
    """Start a fresh conversation and return its first question."""
    return await service.restart()


@router.post("/retry-save", response_model=RetrySaveResponse, response_model_exclude_none=True)
async def retry_save(
    request: RetrySaveRequest,
    service: OnboardingService = Depends(get_onboarding_service),
):
    """Retry persisting a completed profile whose save failed.

    Raises:
        HTTPException(400): If the session id or email is missing
        HTTPException(404): If the session does not exist
    """
    return await service.retry_save(request.session_id)
