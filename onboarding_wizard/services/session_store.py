"""Redis-backed onboarding session store with a sliding TTL.

Every write resets the key's expiry, so a session lives for ``ttl`` seconds
after its last interaction. A missing key and an expired key look the same:
``get`` returns None for both.

Concurrent turns for the same session are not serialized: read-modify-write
is last-writer-wins, and every write extends the TTL.
"""

import json
import time
import uuid

import structlog
from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from onboarding_wizard.core.exceptions import StoreReadError, StoreWriteError
from onboarding_wizard.schemas.onboarding import OnboardingProfile, SessionState

logger = structlog.get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionStore:
    """Create/get/update/delete onboarding sessions in Redis."""

    KEY_PREFIX = "session:"
    DEFAULT_TTL = 3600  # 60 minutes

    def __init__(self, redis: Redis, ttl: int = DEFAULT_TTL):
        self.redis = redis
        self.ttl = ttl

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    async def _write(self, session_id: str, state: SessionState) -> None:
        payload = state.model_dump_json(by_alias=True)
        try:
            result = await self.redis.set(self._key(session_id), payload, ex=self.ttl)
        except RedisError as e:
            logger.error("session_write_failed", session_id=session_id, error=str(e), error_type=type(e).__name__)
            raise StoreWriteError(f"Failed to write session {session_id}: {e}") from e

        if not result:
            logger.error("session_write_unconfirmed", session_id=session_id, result=result)
            raise StoreWriteError(f"Session write for {session_id} was not confirmed (result={result!r})")

    async def create(self) -> tuple[str, SessionState]:
        """Create a fresh session at question 0.

        Returns:
            Tuple of (session_id, initial_state)

        Raises:
            StoreWriteError: If the store does not confirm the write
        """
        session_id = str(uuid.uuid4())
        state = SessionState(
            question_index=0,
            accumulated_data=OnboardingProfile(session_id=session_id),
            reprompted_index=None,
            last_interaction_timestamp=_now_ms(),
        )
        await self._write(session_id, state)
        logger.info("session_created", session_id=session_id, ttl=self.ttl)
        return session_id, state

    async def get(self, session_id: str | None) -> SessionState | None:
        """Load a session. Returns None when it never existed or has expired.

        Raises:
            StoreReadError: If the store cannot be reached
        """
        if not session_id:
            logger.warning("session_get_without_id")
            return None

        try:
            data = await self.redis.get(self._key(session_id))
        except RedisError as e:
            logger.error("session_read_failed", session_id=session_id, error=str(e), error_type=type(e).__name__)
            raise StoreReadError(f"Failed to read session {session_id}: {e}") from e

        if data is None:
            logger.info("session_not_found", session_id=session_id)
            return None

        try:
            return SessionState.model_validate(json.loads(data))
        except (ValueError, ValidationError) as e:
            # An unreadable record is as unrecoverable as an expired one.
            logger.warning("session_record_unreadable", session_id=session_id, error=str(e))
            return None

    async def update(self, session_id: str, state: SessionState) -> None:
        """Overwrite a session, stamp its interaction time and reset its TTL.

        Raises:
            StoreWriteError: If the store does not confirm the write
        """
        if not session_id:
            raise StoreWriteError("update called without a session id")

        state.last_interaction_timestamp = _now_ms()
        await self._write(session_id, state)
        logger.debug("session_updated", session_id=session_id, question_index=state.question_index)

    async def delete(self, session_id: str | None) -> None:
        """Delete a session. Best-effort: logs and never raises."""
        if not session_id:
            logger.warning("session_delete_without_id")
            return

        try:
            deleted = await self.redis.delete(self._key(session_id))
        except RedisError as e:
            logger.error("session_delete_failed", session_id=session_id, error=str(e), error_type=type(e).__name__)
            return

        if deleted:
            logger.info("session_deleted", session_id=session_id)
        else:
            logger.info("session_delete_noop", session_id=session_id)
