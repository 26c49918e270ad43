"""OnboardingService: the session-backed conversation controller.

Responsibilities:
- Session resolution: new conversation, expired-session restart, resume
- Per-turn validation outcome: accept, reprompt once, halt (email) or degrade to null
- Parser dispatch, index advancement and completion detection
- Completion: path determination, profile persistence, session teardown
- Side channels: back navigation, restart, retry-save, connectivity self-check

A session whose save failed at completion is kept (at index N with the full
profile) so retry-save can use it; only a successful save deletes it.
"""

from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import HTTPException

from onboarding_wizard.core.exceptions import ConsistencyError, SessionStoreError
from onboarding_wizard.domain.parsing import apply_answer
from onboarding_wizard.domain.paths import PathDeterminer, recommendation_intro
from onboarding_wizard.domain.questionnaire import QuestionCatalog
from onboarding_wizard.domain.validation import validate_input
from onboarding_wizard.schemas.onboarding import (
    FinalResult,
    QuestionDefinition,
    RawResponse,
    RestartResponse,
    RetrySaveResponse,
    SessionState,
    TurnResponse,
    ValidationHint,
)
from onboarding_wizard.services.profile_persistence import ProfileRepository
from onboarding_wizard.services.session_store import SessionStore

logger = structlog.get_logger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session expired. Please start again."
EMAIL_HALT_MESSAGE = "A valid email address is required. Please refresh to start over."
MISSING_EMAIL_MESSAGE = "Internal processing error: Missing required email data."
FIRST_QUESTION_MISSING_MESSAGE = "Could not initialize the first question."
RESTART_FAILED_MESSAGE = "Failed to restart the conversation. Please try again."
RETRY_SAVE_FAILED_MESSAGE = "Unable to save your data. Please try again or contact support."
RETRY_SAVE_OK_MESSAGE = "Your information has been successfully saved!"


class OnboardingService:
    """Turn-by-turn onboarding controller over a session store and a profile repository."""

    def __init__(
        self,
        store: SessionStore,
        catalog: QuestionCatalog,
        repository: ProfileRepository,
        path_determiner: PathDeterminer,
    ):
        """Initialize with injected collaborators.

        Args:
            store: Redis-backed session store
            catalog: Question catalog (its length is the total question count)
            repository: Durable store for completed profiles
            path_determiner: Rule engine for the recommended path
        """
        self.store = store
        self.catalog = catalog
        self.repository = repository
        self.path_determiner = path_determiner

    def question_payload(self, question: QuestionDefinition, name: str | None = None) -> dict[str, Any]:
        """Wire fields describing ``question``, with ``{name}`` rendered."""
        return {
            "next_question": question.render_text(name),
            "input_mode": question.input_mode,
            "options": list(question.options),
            "conditional_text_input_label": question.conditional_text_input_label,
            "conditional_trigger_value": question.conditional_trigger_value,
            "is_last_question": self.catalog.is_final(question.index),
        }

    def _require_question(self, index: int, session_id: str) -> QuestionDefinition:
        question = self.catalog.get(index)
        if question is None:
            logger.error("question_missing", session_id=session_id, question_index=index)
            raise ConsistencyError(f"No question definition for index {index} (session {session_id})")
        return question

    async def handle_turn(
        self,
        session_id: str | None,
        response: RawResponse,
        conditional_text: str | None = None,
    ) -> TurnResponse:
        """Process one conversation turn.

        Args:
            session_id: Session to resume, or None to start a conversation
            response: Raw answer to the current question
            conditional_text: Free text sent with a conditional answer

        Returns:
            TurnResponse with the next question, a reprompt, a halt or the final result

        Raises:
            SessionStoreError: If a required session read or write fails
            ConsistencyError: If the catalog has no question where one is expected,
                or completion is reached without an email
        """
        if not session_id:
            new_id, state = await self.store.create()
            logger.info("conversation_started", session_id=new_id)
            first = self._require_question(0, new_id)
            return TurnResponse(session_id=new_id, current_question_index=0, **self.question_payload(first))

        state = await self.store.get(session_id)
        if state is None:
            new_id, _ = await self.store.create()
            logger.warning("conversation_restarted_after_expiry", session_id=session_id, new_session_id=new_id)
            first = self._require_question(0, new_id)
            return TurnResponse(
                session_id=new_id,
                new_session_id=new_id,
                current_question_index=0,
                error=SESSION_EXPIRED_MESSAGE,
                halt_flow=False,
                **self.question_payload(first),
            )

        question = self.catalog.get(state.question_index)
        if question is not None:
            early = await self._process_response(session_id, state, question, response, conditional_text)
            if early is not None:
                return early

        if state.question_index >= self.catalog.total_count:
            return await self._complete(session_id, state)

        next_question = self._require_question(state.question_index, session_id)
        await self.store.update(session_id, state)
        return TurnResponse(
            session_id=session_id,
            current_question_index=state.question_index,
            **self.question_payload(next_question, state.accumulated_data.name),
        )

    async def _process_response(
        self,
        session_id: str,
        state: SessionState,
        question: QuestionDefinition,
        response: RawResponse,
        conditional_text: str | None,
    ) -> TurnResponse | None:
        """Validate and parse the answer to the current question.

        Returns a TurnResponse when the turn ends early (reprompt or halt);
        otherwise mutates ``state`` (profile and index) and returns None.
        """
        index = question.index
        is_second_attempt = state.reprompted_index == index
        is_valid = validate_input(response, question.validation_hint)

        if not is_valid:
            if not is_second_attempt and question.re_prompt_message:
                state.reprompted_index = index
                await self.store.update(session_id, state)
                logger.info("answer_reprompted", session_id=session_id, question_index=index)
                return TurnResponse(
                    session_id=session_id,
                    current_question_index=index,
                    error=question.re_prompt_message,
                    halt_flow=False,
                    **self.question_payload(question, state.accumulated_data.name),
                )

            if question.validation_hint == ValidationHint.EMAIL:
                # The stored session is left untouched.
                logger.error("conversation_halted", session_id=session_id, question_index=index, reason="invalid_email")
                return TurnResponse(
                    session_id=session_id,
                    current_question_index=index,
                    error=EMAIL_HALT_MESSAGE,
                    halt_flow=True,
                )

            logger.info("answer_discarded", session_id=session_id, question_index=index)

        state.reprompted_index = None
        apply_answer(
            question,
            response if is_valid else None,
            state.accumulated_data,
            conditional_text if is_valid else None,
        )
        state.question_index = index + 1
        logger.debug("question_answered", session_id=session_id, question_index=index)
        return None

    async def _complete(self, session_id: str, state: SessionState) -> TurnResponse:
        """Determine the path, persist the profile and tear the session down."""
        profile = state.accumulated_data
        profile.created_at = datetime.now(UTC)

        if not profile.email:
            logger.error("completion_without_email", session_id=session_id)
            await self.store.delete(session_id)
            raise ConsistencyError(
                f"Session {session_id} reached completion without an email",
                public_message=MISSING_EMAIL_MESSAGE,
            )

        path = self.path_determiner.determine(profile)
        profile.recommended_path = path.recommended_path
        profile.recommended_path_url = path.recommended_path_url

        final_result = FinalResult(
            recommended_path=path.recommended_path,
            recommended_path_url=path.recommended_path_url,
            recommended_path_description=path.description,
        )
        intro = recommendation_intro(profile.name, path.recommended_path, profile.goal)

        result = await self.repository.save(profile)
        if not result.success:
            logger.error(
                "completion_save_failed",
                session_id=session_id,
                error_kind=result.kind,
                error=result.error,
            )
            try:
                await self.store.update(session_id, state)
            except SessionStoreError as e:
                logger.error("completed_session_not_preserved", session_id=session_id, error=str(e))

            return TurnResponse(
                session_id=session_id,
                current_question_index=state.question_index,
                next_question=intro,
                is_final_question=True,
                final_result=final_result,
                error=f"Completed, but profile saving failed: {result.error.rstrip('.')}. Your data has been preserved for retry.",
                halt_flow=False,
            )

        await self.store.delete(session_id)
        logger.info("conversation_completed", session_id=session_id, recommended_path=path.recommended_path)
        return TurnResponse(
            session_id=session_id,
            current_question_index=state.question_index,
            next_question=intro,
            is_final_question=True,
            final_result=final_result,
        )

    async def go_back(self, session_id: str | None, target_index: Any) -> None:
        """Move a session back to ``target_index`` and clear its reprompt state.

        Answers recorded for later questions are left in place until re-answered.

        Raises:
            HTTPException(400): If the session id is missing or the index is not a catalog index
            HTTPException(404): If the session does not exist
        """
        if not session_id:
            raise HTTPException(status_code=400, detail="Session ID is required")

        if (
            not isinstance(target_index, int)
            or isinstance(target_index, bool)
            or not 0 <= target_index < self.catalog.total_count
        ):
            raise HTTPException(status_code=400, detail="Invalid target question index")

        state = await self.store.get(session_id)
        if state is None:
            raise HTTPException(status_code=404, detail="Session not found")

        logger.info(
            "navigated_back",
            session_id=session_id,
            from_index=state.question_index,
            to_index=target_index,
        )
        state.question_index = target_index
        state.reprompted_index = None
        await self.store.update(session_id, state)

    async def restart(self) -> RestartResponse:
        """Start a fresh conversation and return its first question.

        Raises:
            ConsistencyError: If the catalog has no first question
            SessionStoreError: If the session cannot be created
        """
        first = self.catalog.get(0)
        if first is None:
            logger.error("restart_without_questions")
            raise ConsistencyError("Question catalog is empty", public_message=FIRST_QUESTION_MISSING_MESSAGE)

        try:
            session_id, _ = await self.store.create()
        except SessionStoreError as e:
            raise SessionStoreError(str(e), public_message=RESTART_FAILED_MESSAGE) from e

        logger.info("conversation_restarted", session_id=session_id)
        return RestartResponse(
            success=True,
            session_id=session_id,
            current_question_index=0,
            next_question=first.render_text(),
            input_mode=first.input_mode,
            options=list(first.options),
            conditional_text_input_label=first.conditional_text_input_label,
            conditional_trigger_value=first.conditional_trigger_value,
        )

    async def retry_save(self, session_id: str | None) -> RetrySaveResponse:
        """Re-attempt persistence for a completed session whose save failed.

        Raises:
            HTTPException(400): If the session id or the profile's email is missing
            HTTPException(404): If the session does not exist
        """
        if not session_id:
            raise HTTPException(status_code=400, detail="Session ID is required")

        state = await self.store.get(session_id)
        if state is None:
            raise HTTPException(status_code=404, detail="Session not found or expired")

        profile = state.accumulated_data
        if not profile.email:
            logger.error("retry_save_without_email", session_id=session_id)
            raise HTTPException(status_code=400, detail="Missing required email data")

        result = await self.repository.save(profile)
        if not result.success:
            logger.error("retry_save_failed", session_id=session_id, error_kind=result.kind, error=result.error)
            return RetrySaveResponse(
                success=False,
                error=f"Save operation failed: {result.error}",
                message=RETRY_SAVE_FAILED_MESSAGE,
            )

        await self.store.delete(session_id)
        logger.info("retry_save_succeeded", session_id=session_id)
        return RetrySaveResponse(success=True, message=RETRY_SAVE_OK_MESSAGE)

    async def check_services(self) -> bool:
        """Round-trip a throwaway session through the store (create, read, delete).

        Raises:
            SessionStoreError: If the store cannot be written or read
        """
        check_id, _ = await self.store.create()
        try:
            retrieved = await self.store.get(check_id)
        finally:
            await self.store.delete(check_id)
        return retrieved is not None
