"""Tests for per-hint input validation."""

import pytest

from onboarding_wizard.domain.validation import is_valid_email, validate_input
from onboarding_wizard.schemas.onboarding import ButtonResponse, ValidationHint

pytestmark = pytest.mark.unit


class TestNoHint:
    def test_any_response_is_valid_without_hint(self):
        assert validate_input("anything", None) is True
        assert validate_input(None, None) is True
        assert validate_input(["a", "b"], None) is True

    def test_unknown_hint_is_treated_as_valid(self):
        assert validate_input("whatever", "phone_number") is True


class TestEmail:
    @pytest.mark.parametrize("value", ["ada@example.com", "  ada.l@sub.example.org  ", "a+b@x.io"])
    def test_valid_addresses(self, value):
        assert validate_input(value, ValidationHint.EMAIL) is True

    @pytest.mark.parametrize("value", ["", "   ", "ada", "ada@example", "@example.com", "ada @example.com", None])
    def test_invalid_addresses(self, value):
        assert validate_input(value, ValidationHint.EMAIL) is False

    def test_non_string_is_invalid(self):
        assert validate_input(ButtonResponse(button_value="ada@example.com"), ValidationHint.EMAIL) is False
        assert is_valid_email(["ada@example.com"]) is False


class TestHandles:
    @pytest.mark.parametrize(
        "hint",
        [ValidationHint.GITHUB_USERNAME, ValidationHint.TELEGRAM_HANDLE, ValidationHint.X_HANDLE],
    )
    @pytest.mark.parametrize("value", [None, "", "  ", "none", "N/A", "no"])
    def test_empty_handles_are_valid(self, hint, value):
        assert validate_input(value, hint) is True

    def test_github_username_rules(self):
        assert validate_input("ada-lovelace", ValidationHint.GITHUB_USERNAME) is True
        assert validate_input("@ada", ValidationHint.GITHUB_USERNAME) is False
        assert validate_input("-ada", ValidationHint.GITHUB_USERNAME) is False
        assert validate_input("ada_lovelace", ValidationHint.GITHUB_USERNAME) is False
        assert validate_input("a" * 40, ValidationHint.GITHUB_USERNAME) is False

    def test_telegram_handle_rules(self):
        assert validate_input("@ada_l", ValidationHint.TELEGRAM_HANDLE) is True
        assert validate_input("ada", ValidationHint.TELEGRAM_HANDLE) is False
        assert validate_input("ada-lovelace", ValidationHint.TELEGRAM_HANDLE) is False

    def test_x_handle_rules(self):
        assert validate_input("@ada", ValidationHint.X_HANDLE) is True
        assert validate_input("a" * 16, ValidationHint.X_HANDLE) is False
        assert validate_input("ada lovelace", ValidationHint.X_HANDLE) is False

    def test_non_string_handle_is_invalid(self):
        assert validate_input(["ada"], ValidationHint.GITHUB_USERNAME) is False
