"""Onboarding Pydantic schemas: catalog entries, session state, profile and API contracts."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class InputMode(StrEnum):
    """What raw response shapes a question accepts."""

    TEXT = "text"
    BUTTONS = "buttons"
    CONDITIONAL_TEXT = "conditionalText"


class ValidationHint(StrEnum):
    """Symbolic names selecting an input validator."""

    EMAIL = "email"
    GITHUB_USERNAME = "github_username"
    TELEGRAM_HANDLE = "telegram_handle"
    X_HANDLE = "x_handle"


class CamelModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ButtonOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class QuestionDefinition(CamelModel):
    """A single catalog entry. ``field`` names the parser that consumes its answer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    index: int
    text: str
    input_mode: InputMode
    field: str
    options: tuple[ButtonOption, ...] = ()
    is_multi_select: bool = False
    conditional_trigger_value: str | None = None
    conditional_text_input_label: str | None = None
    validation_hint: ValidationHint | None = None
    re_prompt_message: str | None = None
    is_optional: bool = False
    placeholder: str | None = None

    def render_text(self, name: str | None = None) -> str:
        """Question text with the ``{name}`` placeholder filled in."""
        return self.text.replace("{name}", name or "there")


class OnboardingProfile(BaseModel):
    """Profile accumulated across turns. Every field is optional until completion."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")

    # Identity / contact
    name: str | None = None
    email: str | None = None
    telegram: str | None = None
    github: str | None = None
    x: str | None = None

    # Technical signal
    languages: list[str] | None = None
    other_languages: str | None = None
    blockchain_experience: str | None = None
    blockchain_platforms: list[str] | None = None
    ai_experience: str | None = None
    ai_ml_areas: str | None = None
    tools_familiarity: str | None = None
    experience_level: str | None = None

    # Engagement
    hackathon: list[str] | None = None
    goal: str | None = None
    portfolio: str | None = None
    additional_skills: str | None = None

    # Derived at completion
    recommended_path: str | None = Field(default=None, alias="recommendedPath")
    recommended_path_url: str | None = Field(default=None, alias="recommendedPathUrl")
    created_at: datetime | None = Field(default=None, alias="createdAt")


class SessionState(CamelModel):
    """Session record stored under ``session:<uuid>``."""

    question_index: int = 0
    accumulated_data: OnboardingProfile = Field(default_factory=OnboardingProfile)
    reprompted_index: int | None = None
    last_interaction_timestamp: int = 0  # epoch milliseconds


class ButtonResponse(CamelModel):
    """Button click payload, optionally carrying the values of a multi-select."""

    button_value: str | None = None
    selected_values: list[str] | None = None


RawResponse = str | ButtonResponse | list[str] | None


class TurnRequest(CamelModel):
    session_id: str | None = None
    response: str | ButtonResponse | list[str] | None = None
    conditional_text: str | None = None


class FinalResult(CamelModel):
    recommended_path: str
    recommended_path_url: str
    recommended_path_description: str | None = None


class TurnResponse(CamelModel):
    """Response for one conversation turn. Unset fields are omitted on the wire."""

    session_id: str
    new_session_id: str | None = None
    current_question_index: int
    next_question: str | None = None
    input_mode: InputMode | None = None
    options: list[ButtonOption] | None = None
    conditional_text_input_label: str | None = None
    conditional_trigger_value: str | None = None
    is_last_question: bool | None = None  # the question being presented is the catalog's last
    is_final_question: bool | None = None  # the conversation is complete
    final_result: FinalResult | None = None
    error: str | None = None
    halt_flow: bool | None = None


class BackRequest(CamelModel):
    session_id: str | None = None
    # Checked by the service so a malformed index is a 400, not a 422.
    target_question_index: Any = None


class BackResponse(BaseModel):
    success: bool


class RestartResponse(CamelModel):
    success: bool
    session_id: str
    current_question_index: int
    next_question: str
    input_mode: InputMode
    options: list[ButtonOption]
    conditional_text_input_label: str | None = None
    conditional_trigger_value: str | None = None


class RetrySaveRequest(CamelModel):
    session_id: str | None = None


class RetrySaveResponse(BaseModel):
    success: bool
    message: str | None = None
    error: str | None = None
