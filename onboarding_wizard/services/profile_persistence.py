"""Profile persistence with bounded retry and error classification.

Saves a completed onboarding profile as one row of ``onboarding_responses``.

Retry policy:
- Up to ``max_attempts`` attempts (default 3), each bounded by ``timeout`` seconds
- Delay before attempt n+1: base * 2^(n-1) * uniform(0.9, 1.1)
- Only transient failures (timeouts, connectivity, operational errors) are retried
- Duplicate email and missing table/schema errors return immediately

``save`` never raises; every outcome is a SaveResult.
"""

import asyncio
import random
import socket
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from onboarding_wizard.db.models.onboarding_response import OnboardingResponse
from onboarding_wizard.domain.validation import is_valid_email
from onboarding_wizard.schemas.onboarding import OnboardingProfile

logger = structlog.get_logger(__name__)


class SaveErrorKind(StrEnum):
    INVALID_EMAIL = "invalid_email"
    DUPLICATE_EMAIL = "duplicate_email"
    SCHEMA_MISSING = "schema_missing"
    INTEGRITY = "integrity"
    CONNECTIVITY = "connectivity"
    TIMEOUT = "timeout"
    TRANSIENT = "transient"


RETRYABLE_KINDS = frozenset({SaveErrorKind.CONNECTIVITY, SaveErrorKind.TIMEOUT, SaveErrorKind.TRANSIENT})

# Postgres SQLSTATE codes
UNIQUE_VIOLATION = "23505"
UNDEFINED_TABLE = "42P01"

# Matched case-insensitively against "{error_type} {error_message}".
_DUPLICATE_PATTERNS: tuple[str, ...] = (
    "unique constraint",
    "duplicate key",
    "uniqueviolation",
)

_SCHEMA_PATTERNS: tuple[str, ...] = (
    "no such table",
    "undefinedtable",
    "does not exist",
)

_CONNECTIVITY_PATTERNS: tuple[str, ...] = (
    "connection refused",
    "could not connect",
    "name resolution",
    "name or service not known",
    "nodename nor servname",
    "network is unreachable",
    "connection reset",
)


# Client-facing text per failure kind. Raw driver errors carry SQL and bound
# parameters, so they only go to the log.
SAVE_ERROR_MESSAGES: dict[SaveErrorKind, str] = {
    SaveErrorKind.INVALID_EMAIL: "Email is required and must be valid to save the response.",
    SaveErrorKind.DUPLICATE_EMAIL: "Email already exists",
    SaveErrorKind.SCHEMA_MISSING: "Profile storage is unavailable",
    SaveErrorKind.INTEGRITY: "Profile rejected by the database",
    SaveErrorKind.CONNECTIVITY: "DB save failed after multiple attempts",
    SaveErrorKind.TIMEOUT: "DB save failed after multiple attempts",
    SaveErrorKind.TRANSIENT: "DB save failed after multiple attempts",
}

UNKNOWN_SAVE_ERROR_MESSAGE = "Unknown error occurred during the database save process."


@dataclass
class SaveResult:
    success: bool
    error: str | None = None
    kind: SaveErrorKind | None = None
    attempts: int = 0


class SaveAttemptError(Exception):
    """A single failed insert, already classified."""

    def __init__(self, kind: SaveErrorKind, message: str):
        self.kind = kind
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS


def _sqlstate(exc: BaseException) -> str | None:
    orig = getattr(exc, "orig", None)
    for candidate in (exc, orig):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def classify_save_error(exc: BaseException) -> SaveErrorKind:
    """Map a database/driver exception onto a SaveErrorKind.

    SQLSTATE codes win when the driver exposes them; otherwise the combined
    type name and message are matched against known patterns. Unknown
    errors are TRANSIENT (retried).
    """
    if isinstance(exc, TimeoutError):
        return SaveErrorKind.TIMEOUT

    code = _sqlstate(exc)
    if code == UNIQUE_VIOLATION:
        return SaveErrorKind.DUPLICATE_EMAIL
    if code == UNDEFINED_TABLE:
        return SaveErrorKind.SCHEMA_MISSING

    combined = f"{type(exc).__name__} {exc}".lower()

    if isinstance(exc, IntegrityError):
        if any(p in combined for p in _DUPLICATE_PATTERNS):
            return SaveErrorKind.DUPLICATE_EMAIL
        return SaveErrorKind.INTEGRITY

    if any(p in combined for p in _SCHEMA_PATTERNS):
        return SaveErrorKind.SCHEMA_MISSING

    if isinstance(exc, (ConnectionError, socket.gaierror)) or any(p in combined for p in _CONNECTIVITY_PATTERNS):
        return SaveErrorKind.CONNECTIVITY

    return SaveErrorKind.TRANSIENT


def profile_to_record(profile: OnboardingProfile) -> dict[str, Any]:
    """Flatten a profile into ``onboarding_responses`` columns.

    ``x`` is stored as ``x_handle``, ``hackathon`` is a list or None, and the
    session id is dropped. ``created_at`` is left to the database default
    unless the profile carries one.
    """
    hackathon = profile.hackathon
    if isinstance(hackathon, str):
        hackathon = [hackathon]

    record: dict[str, Any] = {
        "name": profile.name,
        "email": profile.email.strip() if profile.email else profile.email,
        "telegram": profile.telegram,
        "github": profile.github,
        "x_handle": profile.x,
        "languages": profile.languages,
        "other_languages": profile.other_languages,
        "blockchain_experience": profile.blockchain_experience,
        "blockchain_platforms": profile.blockchain_platforms,
        "ai_experience": profile.ai_experience,
        "ai_ml_areas": profile.ai_ml_areas,
        "tools_familiarity": profile.tools_familiarity,
        "experience_level": profile.experience_level,
        "hackathon": hackathon or None,
        "goal": profile.goal,
        "portfolio": profile.portfolio,
        "additional_skills": profile.additional_skills,
        "recommended_path": profile.recommended_path,
        "recommended_path_url": profile.recommended_path_url,
    }
    if profile.created_at is not None:
        record["created_at"] = profile.created_at
    return record


class ProfileRepository:
    """Durable store for completed onboarding profiles."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_attempts: int = 3,
        base_delay: float = 0.25,
        timeout: float = 10.0,
    ):
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.timeout = timeout

    def _backoff(self, retry_state: RetryCallState) -> float:
        """Exponential backoff with +/-10% jitter."""
        return self.base_delay * 2 ** (retry_state.attempt_number - 1) * random.uniform(0.9, 1.1)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "profile_save_retrying",
            attempt=retry_state.attempt_number,
            sleep_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
            error_kind=getattr(exc, "kind", None),
            error=str(exc) if exc else None,
        )

    async def _insert(self, record: dict[str, Any]) -> None:
        """Insert one row within the per-attempt timeout, classifying any failure."""
        try:
            async with asyncio.timeout(self.timeout):
                async with self.session_factory() as session:
                    session.add(OnboardingResponse(**record))
                    await session.commit()
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            kind = classify_save_error(e)
            if kind == SaveErrorKind.CONNECTIVITY:
                logger.error("profile_save_connectivity_failure", error=str(e), error_type=type(e).__name__)
            raise SaveAttemptError(kind, str(e) or type(e).__name__) from e

    async def save(self, profile: OnboardingProfile) -> SaveResult:
        """Persist a completed profile.

        Args:
            profile: Completed profile (must carry a valid email)

        Returns:
            SaveResult with success flag, user-safe error text and error kind
        """
        if not is_valid_email(profile.email):
            logger.error("profile_save_rejected", reason="invalid_email", session_id=profile.session_id)
            return SaveResult(
                success=False,
                error=SAVE_ERROR_MESSAGES[SaveErrorKind.INVALID_EMAIL],
                kind=SaveErrorKind.INVALID_EMAIL,
            )

        record = profile_to_record(profile)
        attempts = 0

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._backoff,
            retry=retry_if_exception(lambda e: isinstance(e, SaveAttemptError) and e.retryable),
            reraise=True,
            before_sleep=self._log_retry,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    await self._insert(record)
        except SaveAttemptError as e:
            logger.error(
                "profile_save_failed",
                session_id=profile.session_id,
                attempts=attempts,
                error_kind=e.kind,
                error=str(e),
            )
            return SaveResult(success=False, error=SAVE_ERROR_MESSAGES[e.kind], kind=e.kind, attempts=attempts)
        except Exception as e:
            logger.error(
                "profile_save_unexpected_error",
                session_id=profile.session_id,
                attempts=attempts,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return SaveResult(
                success=False,
                error=UNKNOWN_SAVE_ERROR_MESSAGE,
                kind=SaveErrorKind.TRANSIENT,
                attempts=attempts,
            )

        logger.info("profile_saved", session_id=profile.session_id, attempts=attempts)
        return SaveResult(success=True, attempts=attempts)
