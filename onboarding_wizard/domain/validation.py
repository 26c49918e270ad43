"""Input validators keyed by a question's validation hint.

Pure predicates: no state, no exceptions. A missing or unknown hint accepts
anything.
"""

import re

from onboarding_wizard.schemas.onboarding import RawResponse, ValidationHint

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
GITHUB_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]{0,38}$")
TELEGRAM_HANDLE_PATTERN = re.compile(r"^@?[A-Za-z0-9_]{5,32}$")
X_HANDLE_PATTERN = re.compile(r"^@?[A-Za-z0-9_]{1,15}$")

# Answers to optional questions that mean "nothing to give".
EMPTY_ANSWERS = frozenset({"none", "no", "n/a"})

_HANDLE_PATTERNS: dict[ValidationHint, re.Pattern[str]] = {
    ValidationHint.GITHUB_USERNAME: GITHUB_USERNAME_PATTERN,
    ValidationHint.TELEGRAM_HANDLE: TELEGRAM_HANDLE_PATTERN,
    ValidationHint.X_HANDLE: X_HANDLE_PATTERN,
}


def is_valid_email(value: object) -> bool:
    if not isinstance(value, str):
        return False
    value = value.strip()
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def _is_valid_optional_handle(value: object, pattern: re.Pattern[str]) -> bool:
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    value = value.strip()
    if not value or value.lower() in EMPTY_ANSWERS:
        return True
    return pattern.match(value) is not None


def validate_input(response: RawResponse, validation_hint: ValidationHint | str | None) -> bool:
    """Check a raw answer against the rule selected by ``validation_hint``.

    Args:
        response: Raw answer as received (string, button payload, list or None)
        validation_hint: Hint from the question definition

    Returns:
        True when the answer is acceptable (or no rule applies)
    """
    if not validation_hint:
        return True

    try:
        hint = ValidationHint(validation_hint)
    except ValueError:
        return True

    if hint == ValidationHint.EMAIL:
        return is_valid_email(response)

    return _is_valid_optional_handle(response, _HANDLE_PATTERNS[hint])
