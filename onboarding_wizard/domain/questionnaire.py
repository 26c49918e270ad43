"""Question catalog.

Pure, stateless lookups over an immutable list of question definitions.
The catalog is built once at startup and shared by every session.
"""

from collections.abc import Sequence

from onboarding_wizard.schemas.onboarding import (
    ButtonOption,
    InputMode,
    QuestionDefinition,
    ValidationHint,
)

# Language values the languages parser accepts (every button value except None/Other).
RECOGNIZED_LANGUAGES: tuple[str, ...] = (
    "Rust",
    "JavaScript",
    "Python",
    "Go",
    "Solidity",
    "TypeScript",
    "Java",
    "C#",
)

GOALS: tuple[str, ...] = (
    "Build apps/dApps",
    "Earn bounties",
    "Share ideas for new features",
    "Work on AI projects",
    "Promote blockchain/Andromeda",
    "Learn Web3 basics",
)


def _numbered(values: Sequence[str]) -> tuple[ButtonOption, ...]:
    return tuple(ButtonOption(label=f"{i}. {v}", value=v) for i, v in enumerate(values, start=1))


DEFAULT_QUESTIONS: tuple[QuestionDefinition, ...] = (
    QuestionDefinition(
        index=0,
        text="What shall I call you?",
        input_mode=InputMode.TEXT,
        field="name",
    ),
    QuestionDefinition(
        index=1,
        text="Which programming languages are you most comfortable with, {name}? (Select all that apply, or 'None')",
        input_mode=InputMode.BUTTONS,
        field="languages",
        options=_numbered(RECOGNIZED_LANGUAGES)
        + (
            ButtonOption(label="9. Other", value="Other"),
            ButtonOption(label="10. None of these / No experience yet", value="None"),
        ),
        is_multi_select=True,
        conditional_trigger_value="Other",
        conditional_text_input_label="Which other languages do you use?",
    ),
    QuestionDefinition(
        index=2,
        text="Have you built on any blockchain platforms?",
        input_mode=InputMode.CONDITIONAL_TEXT,
        field="blockchain",
        options=(
            ButtonOption(label="1. Yes", value="Yes"),
            ButtonOption(label="2. No, but I'm curious", value="No - curious"),
            ButtonOption(label="3. No experience", value="No experience"),
        ),
        conditional_trigger_value="Yes",
        conditional_text_input_label="Which platforms? (e.g. Ethereum, Solana, Cosmos SDK chains)",
    ),
    QuestionDefinition(
        index=3,
        text="Do you have experience with AI/ML beyond ChatGPT?",
        input_mode=InputMode.CONDITIONAL_TEXT,
        field="ai",
        options=(
            ButtonOption(label="1. Yes", value="Yes"),
            ButtonOption(label="2. No", value="No"),
        ),
        conditional_trigger_value="Yes",
        conditional_text_input_label="Which areas? (e.g. NLP, Computer Vision, MLOps)",
    ),
    QuestionDefinition(
        index=4,
        text="Okay, great. So, how familiar are you with Andromeda's tools?",
        input_mode=InputMode.BUTTONS,
        field="tools_familiarity",
        options=_numbered(("Very familiar", "Some experience", "Beginner", "No idea")),
    ),
    QuestionDefinition(
        index=5,
        text="How would you rate your technical expertise?",
        input_mode=InputMode.BUTTONS,
        field="experience_level",
        options=_numbered(("Beginner", "Intermediate", "Advanced")),
    ),
    QuestionDefinition(
        index=6,
        text="Have you ever participated in a hackathon?",
        input_mode=InputMode.BUTTONS,
        field="hackathon",
        options=(
            ButtonOption(label="Yes, a web 2 one", value="Web2"),
            ButtonOption(label="Yes, a web3 one", value="Web3"),
            ButtonOption(label="I won!", value="Winner"),
            ButtonOption(label="No, I haven't", value="No"),
        ),
        is_multi_select=True,
    ),
    QuestionDefinition(
        index=7,
        text="Out of these broad choices, what are your goals here, {name}?",
        input_mode=InputMode.BUTTONS,
        field="goal",
        options=_numbered(GOALS),
    ),
    QuestionDefinition(
        index=8,
        text="Got a portfolio or project links to showcase? (Optional, but helpful!)",
        input_mode=InputMode.TEXT,
        field="portfolio",
        is_optional=True,
    ),
    QuestionDefinition(
        index=9,
        text="Anything else we should know about your skills or interests? (Optional)",
        input_mode=InputMode.TEXT,
        field="additional_skills",
        is_optional=True,
    ),
    QuestionDefinition(
        index=10,
        text="What email should we use to stay in touch, {name}?",
        input_mode=InputMode.TEXT,
        field="email",
        validation_hint=ValidationHint.EMAIL,
        re_prompt_message="Please provide a valid email address.",
    ),
    QuestionDefinition(
        index=11,
        text="What is your GitHub username? (Optional)",
        input_mode=InputMode.TEXT,
        field="github",
        validation_hint=ValidationHint.GITHUB_USERNAME,
        re_prompt_message="That doesn't look like a GitHub username. Letters, numbers and hyphens only.",
        is_optional=True,
    ),
    QuestionDefinition(
        index=12,
        text="What is your Telegram handle? (Optional)",
        input_mode=InputMode.TEXT,
        field="telegram",
        validation_hint=ValidationHint.TELEGRAM_HANDLE,
        re_prompt_message="Telegram handles are 5-32 letters, numbers or underscores.",
        is_optional=True,
        placeholder="@yourhandle",
    ),
    QuestionDefinition(
        index=13,
        text="What is your X/Twitter handle? (Optional)",
        input_mode=InputMode.TEXT,
        field="x",
        validation_hint=ValidationHint.X_HANDLE,
        re_prompt_message="X handles are up to 15 letters, numbers or underscores.",
        is_optional=True,
        placeholder="@yourhandle",
    ),
)


class QuestionCatalog:
    """Ordered, read-only question catalog. Its length is the total question count."""

    def __init__(self, questions: Sequence[QuestionDefinition] = DEFAULT_QUESTIONS):
        questions = tuple(questions)
        for position, question in enumerate(questions):
            if question.index != position:
                raise ValueError(
                    f"Question indices must be contiguous from 0; found {question.index} at position {position}"
                )
        self._questions = questions

    @property
    def total_count(self) -> int:
        return len(self._questions)

    def get(self, index: int) -> QuestionDefinition | None:
        """Question at ``index``, or None when out of range."""
        if 0 <= index < len(self._questions):
            return self._questions[index]
        return None

    def is_final(self, index: int) -> bool:
        return index == len(self._questions) - 1

    def __len__(self) -> int:
        return len(self._questions)
