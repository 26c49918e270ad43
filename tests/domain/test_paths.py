"""Tests for community path determination."""

import itertools

import pytest

from onboarding_wizard.domain.paths import (
    AI_INITIATIVES,
    AMBASSADOR,
    CONTRACTOR,
    EXPLORER,
    HACKER,
    PATH_DESCRIPTIONS,
    PATH_RULES,
    VISIONARY,
    PathDeterminer,
    PathRule,
    placeholder_url,
    recommendation_intro,
)
from onboarding_wizard.domain.questionnaire import GOALS
from onboarding_wizard.schemas.onboarding import OnboardingProfile

pytestmark = pytest.mark.unit


def determine(**fields) -> str:
    return PathDeterminer().determine(OnboardingProfile(**fields)).recommended_path


def test_explorer_scenario():
    assert determine(experience_level="Beginner", goal="Learn Web3 basics") == EXPLORER


def test_contractor_scenario():
    path = determine(
        languages=["Rust", "TypeScript"],
        tools_familiarity="Very familiar",
        experience_level="Advanced",
        goal="Build apps/dApps",
    )

    assert path == CONTRACTOR


def test_contractor_requires_core_language():
    path = determine(
        languages=["TypeScript"],
        tools_familiarity="Very familiar",
        experience_level="Advanced",
        goal="Build apps/dApps",
    )

    assert path == EXPLORER


def test_hacker():
    assert determine(tools_familiarity="Some experience", hackathon=["Web2"], goal="Earn bounties") == HACKER


def test_hacker_needs_hackathon_experience():
    assert determine(tools_familiarity="Some experience", hackathon=["No"], goal="Earn bounties") == EXPLORER


def test_visionary():
    assert determine(goal="Share ideas for new features", experience_level="Intermediate") == VISIONARY


def test_ai_initiatives():
    assert determine(ai_experience="Yes", goal="Work on AI projects") == AI_INITIATIVES


def test_ambassador():
    assert determine(blockchain_experience="Yes", goal="Promote blockchain/Andromeda") == AMBASSADOR


def test_first_match_wins():
    # Matches Visionary (rule 3) and Explorer (rule 6)
    assert determine(goal="Share ideas for new features", experience_level="Beginner") == VISIONARY


def test_empty_profile_falls_back_to_explorer():
    assert determine() == EXPLORER


def test_totality_over_enum_product():
    determiner = PathDeterminer()
    dimensions = itertools.product(
        [None, [], ["Rust"], ["TypeScript", "Solidity"]],
        [None, "Very familiar", "Some experience", "Beginner", "No idea"],
        [None, "Beginner", "Intermediate", "Advanced"],
        [None, *GOALS],
        [None, ["Winner"], ["No"]],
        [None, "Yes", "No"],
        [None, "Yes", "No - curious", "No experience"],
    )

    for languages, tools, level, goal, hackathon, ai, blockchain in dimensions:
        profile = OnboardingProfile(
            languages=languages,
            tools_familiarity=tools,
            experience_level=level,
            goal=goal,
            hackathon=hackathon,
            ai_experience=ai,
            blockchain_experience=blockchain,
        )
        result = determiner.determine(profile)

        assert result.recommended_path in PATH_DESCRIPTIONS
        assert result.recommended_path_url


def test_configured_url_is_used():
    determiner = PathDeterminer({EXPLORER: "https://community.example.org/explorer"})

    result = determiner.determine(OnboardingProfile(goal="Learn Web3 basics"))

    assert result.recommended_path_url == "https://community.example.org/explorer"
    assert result.description == PATH_DESCRIPTIONS[EXPLORER]


def test_missing_url_gets_placeholder():
    assert PathDeterminer().url_for(AI_INITIATIVES) == "https://example.com/placeholder/ai-initiatives"
    assert placeholder_url(CONTRACTOR) == "https://example.com/placeholder/contractor"


def test_failing_rule_is_skipped():
    def broken(profile):
        raise RuntimeError("boom")

    determiner = PathDeterminer(rules=(PathRule(HACKER, broken), *PATH_RULES))

    assert determiner.determine(OnboardingProfile(goal="Work on AI projects", ai_experience="Yes")).recommended_path == AI_INITIATIVES


def test_recommendation_intro():
    assert recommendation_intro("Ada", HACKER, "Earn bounties") == (
        "Thanks, Ada! Since you want to earn bounties, we recommend the Hacker path."
    )
    assert recommendation_intro(None, EXPLORER, None) == "Thanks! Based on your answers, we recommend the Explorer path."
