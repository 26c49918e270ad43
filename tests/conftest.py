"""Shared test fixtures for all test groups."""

import pytest
from fakeredis import FakeAsyncRedis

from onboarding_wizard.domain.questionnaire import QuestionCatalog
from onboarding_wizard.schemas.onboarding import InputMode, QuestionDefinition, ValidationHint
from onboarding_wizard.services.profile_persistence import SaveResult
from onboarding_wizard.services.session_store import SessionStore


class FakeProfileRepository:
    """In-memory ProfileRepository: records saved profiles, replays scripted results."""

    def __init__(self, results: list[SaveResult] | None = None):
        self.results = list(results or [])
        self.saved = []

    async def save(self, profile):
        self.saved.append(profile.model_copy(deep=True))
        if self.results:
            return self.results.pop(0)
        return SaveResult(success=True, attempts=1)


@pytest.fixture
async def redis():
    """Provide fakeredis async client."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def store(redis):
    return SessionStore(redis, ttl=3600)


@pytest.fixture
def fake_repository():
    return FakeProfileRepository()


@pytest.fixture
def repository_factory():
    """Build a FakeProfileRepository that returns the given SaveResults in order."""
    return FakeProfileRepository


@pytest.fixture
def small_catalog():
    """Build a catalog of ``total`` free-text questions whose last question is the email question."""

    def build(total: int) -> QuestionCatalog:
        questions = [
            QuestionDefinition(
                index=i,
                text=f"Question {i}",
                input_mode=InputMode.TEXT,
                field="additional_skills",
            )
            for i in range(total - 1)
        ]
        questions.append(
            QuestionDefinition(
                index=total - 1,
                text="Email?",
                input_mode=InputMode.TEXT,
                field="email",
                validation_hint=ValidationHint.EMAIL,
                re_prompt_message="Please provide a valid email address.",
            )
        )
        return QuestionCatalog(questions)

    return build
