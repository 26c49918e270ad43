"""Answer decoding and per-question response parsers.

Raw answers arrive in several shapes (plain string, button payload, list of
values). ``decode_answer`` turns them into a tagged ``Answer`` once, using the
question's declared input mode as the discriminator; parsers then only read
the tagged form and write normalized fields onto the profile.

Parsers reset the fields they own before writing, so re-parsing the same
answer (after back navigation, say) always gives the same profile.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import structlog
from pydantic import ValidationError

from onboarding_wizard.domain.questionnaire import RECOGNIZED_LANGUAGES
from onboarding_wizard.domain.validation import EMPTY_ANSWERS
from onboarding_wizard.schemas.onboarding import (
    ButtonResponse,
    InputMode,
    OnboardingProfile,
    QuestionDefinition,
    RawResponse,
)

logger = structlog.get_logger(__name__)


class AnswerKind(StrEnum):
    TEXT = "text"  # free text
    CHOICE = "choice"  # a single button, possibly with the values of a multi-select
    SELECTION = "selection"  # a bare list of selected values


@dataclass(frozen=True)
class Answer:
    """Decoded answer.

    ``conditional_text`` is only set when the question's trigger value was
    chosen; otherwise any conditional text sent by the client is ignored.
    """

    kind: AnswerKind
    text: str | None = None
    choice: str | None = None
    selections: tuple[str, ...] = ()
    conditional_text: str | None = None

    def values(self) -> list[str]:
        """Every chosen value, preferring the multi-select list over a single choice."""
        if self.selections:
            return list(self.selections)
        if self.choice:
            return [self.choice]
        if self.text:
            return [self.text]
        return []


def decode_answer(
    raw: RawResponse | dict,
    question: QuestionDefinition,
    conditional_text: str | None = None,
) -> Answer | None:
    """Decode a raw answer according to the question's input mode.

    Args:
        raw: Answer as received from the client
        question: Question being answered
        conditional_text: Free text from the conditional input, if any

    Returns:
        Tagged Answer, or None when nothing usable was sent
    """
    if isinstance(raw, dict):
        try:
            raw = ButtonResponse.model_validate(raw)
        except ValidationError:
            logger.warning("answer_shape_rejected", question_index=question.index, shape="dict")
            return None

    if question.input_mode == InputMode.TEXT:
        if isinstance(raw, str):
            return Answer(kind=AnswerKind.TEXT, text=raw)
        if raw is not None:
            logger.warning(
                "answer_shape_rejected",
                question_index=question.index,
                shape=type(raw).__name__,
            )
        return None

    if isinstance(raw, ButtonResponse):
        selections = _clean_values(raw.selected_values or [])
        choice = raw.button_value.strip() if raw.button_value else None
        kind = AnswerKind.CHOICE if choice else AnswerKind.SELECTION
    elif isinstance(raw, list):
        selections = _clean_values(raw)
        choice = None
        kind = AnswerKind.SELECTION
    elif isinstance(raw, str):
        selections = ()
        choice = raw.strip() or None
        kind = AnswerKind.CHOICE
    else:
        selections = ()
        choice = None
        kind = AnswerKind.SELECTION

    trigger = question.conditional_trigger_value
    triggered = trigger is not None and (choice == trigger or trigger in selections)
    extra = conditional_text.strip() if triggered and isinstance(conditional_text, str) else None

    if not choice and not selections and not extra:
        return None

    return Answer(kind=kind, choice=choice, selections=selections, conditional_text=extra or None)


def _clean_values(values: list) -> tuple[str, ...]:
    return tuple(v.strip() for v in values if isinstance(v, str) and v.strip())


def _clean_text(value: str | None, drop_empty_words: bool = False) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if drop_empty_words and value.lower() in EMPTY_ANSWERS:
        return None
    return value


def _single_value(answer: Answer | None) -> str | None:
    if answer is None:
        return None
    if answer.kind == AnswerKind.TEXT:
        return answer.text
    if answer.choice:
        return answer.choice
    return answer.selections[0] if answer.selections else None


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

Parser = Callable[[Answer | None, OnboardingProfile], None]


def parse_languages(answer: Answer | None, profile: OnboardingProfile) -> None:
    """Keep recognized languages only; always leaves ``languages`` as a list."""
    profile.languages = []
    profile.other_languages = None

    if answer is None:
        logger.info("languages_no_selection")
        return

    candidates = answer.values()
    recognized = [v for v in candidates if v in RECOGNIZED_LANGUAGES]
    dropped = [v for v in candidates if v not in RECOGNIZED_LANGUAGES]
    if dropped:
        logger.info("languages_dropped_unrecognized", dropped=dropped)

    profile.languages = list(dict.fromkeys(recognized))
    profile.other_languages = answer.conditional_text


def parse_blockchain(answer: Answer | None, profile: OnboardingProfile) -> None:
    profile.blockchain_experience = None
    profile.blockchain_platforms = None

    if answer is None:
        return

    if answer.kind == AnswerKind.SELECTION:
        profile.blockchain_platforms = list(answer.selections)
        return

    experience = _single_value(answer)
    if not experience:
        return

    profile.blockchain_experience = experience
    if answer.selections:
        profile.blockchain_platforms = list(answer.selections)
    elif answer.conditional_text:
        platforms = [p.strip() for p in answer.conditional_text.split(",") if p.strip()]
        profile.blockchain_platforms = platforms or [experience]
    else:
        profile.blockchain_platforms = [experience]


def parse_ai(answer: Answer | None, profile: OnboardingProfile) -> None:
    profile.ai_experience = None
    profile.ai_ml_areas = None

    if answer is None:
        return

    if answer.kind == AnswerKind.SELECTION:
        if answer.selections:
            profile.ai_experience = "Yes"
            profile.ai_ml_areas = ", ".join(answer.selections)
        return

    if answer.choice:
        profile.ai_experience = answer.choice
        if answer.selections:
            profile.ai_ml_areas = ", ".join(answer.selections)
        elif answer.conditional_text:
            profile.ai_ml_areas = answer.conditional_text


def parse_hackathon(answer: Answer | None, profile: OnboardingProfile) -> None:
    values = answer.values() if answer is not None else []
    profile.hackathon = values or None


def parse_email(answer: Answer | None, profile: OnboardingProfile) -> None:
    email = _clean_text(_single_value(answer))
    if email:
        profile.email = email


def button_field(field: str) -> Parser:
    """Parser storing a single trimmed button value (empty -> None)."""

    def parse(answer: Answer | None, profile: OnboardingProfile) -> None:
        setattr(profile, field, _clean_text(_single_value(answer)))

    parse.__name__ = f"parse_{field}"
    return parse


def text_field(field: str, drop_empty_words: bool = False) -> Parser:
    """Parser storing trimmed free text (empty -> None)."""

    def parse(answer: Answer | None, profile: OnboardingProfile) -> None:
        setattr(profile, field, _clean_text(_single_value(answer), drop_empty_words))

    parse.__name__ = f"parse_{field}"
    return parse


def handle_field(field: str, at_prefix: bool) -> Parser:
    """Parser for social handles: lowercased, with a normalized leading '@' (or none)."""

    def parse(answer: Answer | None, profile: OnboardingProfile) -> None:
        handle = _clean_text(_single_value(answer), drop_empty_words=True)
        handle = handle.lower().lstrip("@") if handle else None
        if handle and at_prefix:
            handle = f"@{handle}"
        setattr(profile, field, handle or None)

    parse.__name__ = f"parse_{field}"
    return parse


PARSERS: dict[str, Parser] = {
    "name": text_field("name"),
    "languages": parse_languages,
    "blockchain": parse_blockchain,
    "ai": parse_ai,
    "tools_familiarity": button_field("tools_familiarity"),
    "experience_level": button_field("experience_level"),
    "hackathon": parse_hackathon,
    "goal": button_field("goal"),
    "portfolio": text_field("portfolio", drop_empty_words=True),
    "additional_skills": text_field("additional_skills", drop_empty_words=True),
    "email": parse_email,
    "github": handle_field("github", at_prefix=False),
    "telegram": handle_field("telegram", at_prefix=True),
    "x": handle_field("x", at_prefix=True),
}


def apply_answer(
    question: QuestionDefinition,
    raw: RawResponse | dict,
    profile: OnboardingProfile,
    conditional_text: str | None = None,
) -> None:
    """Decode ``raw`` for ``question`` and run the parser registered for its field."""
    parser = PARSERS.get(question.field)
    if parser is None:
        logger.warning("parser_missing", question_index=question.index, field=question.field)
        return

    answer = decode_answer(raw, question, conditional_text)
    parser(answer, profile)
