"""Tests for the question catalog."""

import pytest

from onboarding_wizard.domain.parsing import PARSERS
from onboarding_wizard.domain.questionnaire import DEFAULT_QUESTIONS, QuestionCatalog
from onboarding_wizard.schemas.onboarding import InputMode, QuestionDefinition, ValidationHint

pytestmark = pytest.mark.unit


def test_default_catalog_has_fourteen_questions():
    catalog = QuestionCatalog()

    assert catalog.total_count == 14
    assert len(catalog) == 14


def test_indices_are_contiguous_from_zero():
    assert [q.index for q in DEFAULT_QUESTIONS] == list(range(len(DEFAULT_QUESTIONS)))


def test_get_returns_none_out_of_range():
    catalog = QuestionCatalog()

    assert catalog.get(-1) is None
    assert catalog.get(14) is None
    assert catalog.get(0).field == "name"
    assert catalog.get(13).field == "x"


def test_is_final_only_for_last_index():
    catalog = QuestionCatalog()

    assert catalog.is_final(13) is True
    assert catalog.is_final(12) is False
    assert catalog.is_final(14) is False


def test_non_contiguous_catalog_rejected():
    questions = [
        QuestionDefinition(index=0, text="A", input_mode=InputMode.TEXT, field="name"),
        QuestionDefinition(index=2, text="B", input_mode=InputMode.TEXT, field="email"),
    ]

    with pytest.raises(ValueError, match="contiguous"):
        QuestionCatalog(questions)


def test_every_question_has_a_parser():
    missing = [q.field for q in DEFAULT_QUESTIONS if q.field not in PARSERS]

    assert missing == []


def test_email_question_is_validated_and_reprompts():
    email = QuestionCatalog().get(10)

    assert email.validation_hint == ValidationHint.EMAIL
    assert email.re_prompt_message == "Please provide a valid email address."
    assert email.is_optional is False


def test_button_questions_have_options():
    for question in DEFAULT_QUESTIONS:
        if question.input_mode != InputMode.TEXT:
            assert question.options, f"question {question.index} has no options"


def test_conditional_trigger_is_an_option_value():
    for question in DEFAULT_QUESTIONS:
        if question.conditional_trigger_value is not None:
            values = {o.value for o in question.options}
            assert question.conditional_trigger_value in values


def test_render_text_substitutes_name():
    question = QuestionCatalog().get(7)

    assert question.render_text("Ada") == "Out of these broad choices, what are your goals here, Ada?"
    assert question.render_text(None) == "Out of these broad choices, what are your goals here, there?"


def test_question_serializes_with_camel_case():
    data = QuestionCatalog().get(1).model_dump(by_alias=True)

    assert data["inputMode"] == "buttons"
    assert data["isMultiSelect"] is True
    assert data["conditionalTriggerValue"] == "Other"
