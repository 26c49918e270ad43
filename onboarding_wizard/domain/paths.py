"""Community path determination.

Pure rule cascade over a completed profile. Rules are evaluated top to
bottom and the first match wins; Explorer is the unconditional fallback,
so every profile gets a recommendation.

To add a path, add a PathRule above the fallback and a description below.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

import structlog

from onboarding_wizard.schemas.onboarding import OnboardingProfile

logger = structlog.get_logger(__name__)

CONTRACTOR = "Contractor"
HACKER = "Hacker"
VISIONARY = "Visionary"
AI_INITIATIVES = "AI Initiatives"
AMBASSADOR = "Ambassador"
EXPLORER = "Explorer"

FALLBACK_PATH = EXPLORER

PATH_DESCRIPTIONS: dict[str, str] = {
    CONTRACTOR: "Build production apps and dApps on Andromeda and take on paid contract work.",
    HACKER: "Hunt bounties, ship fast and compete in hackathons.",
    VISIONARY: "Shape the roadmap by proposing and refining new features.",
    AI_INITIATIVES: "Work on AI projects and agents built on top of Andromeda.",
    AMBASSADOR: "Grow the community and spread the word about Andromeda.",
    EXPLORER: "Learn the Web3 basics and find your footing in the ecosystem.",
}

_GOAL_PHRASES: dict[str, str] = {
    "Build apps/dApps": "build apps and dApps",
    "Earn bounties": "earn bounties",
    "Share ideas for new features": "share ideas for new features",
    "Work on AI projects": "work on AI projects",
    "Promote blockchain/Andromeda": "promote blockchain and Andromeda",
    "Learn Web3 basics": "learn the Web3 basics",
}


@dataclass(frozen=True)
class PathRule:
    path: str
    matches: Callable[[OnboardingProfile], bool]


@dataclass(frozen=True)
class PathResult:
    recommended_path: str
    recommended_path_url: str
    description: str | None = None


def _intersects(values: Iterable[str] | None, wanted: set[str]) -> bool:
    return bool(values) and not wanted.isdisjoint(values)


PATH_RULES: tuple[PathRule, ...] = (
    PathRule(
        CONTRACTOR,
        lambda p: (
            _intersects(p.languages, {"Rust", "Solidity", "Python"})
            and p.tools_familiarity in {"Very familiar", "Some experience"}
            and p.experience_level == "Advanced"
            and p.goal == "Build apps/dApps"
        ),
    ),
    PathRule(
        HACKER,
        lambda p: (
            p.tools_familiarity in {"Some experience", "Very familiar"}
            and _intersects(p.hackathon, {"Winner", "Web2", "Web3"})
            and p.goal == "Earn bounties"
        ),
    ),
    PathRule(
        VISIONARY,
        lambda p: p.goal == "Share ideas for new features" and p.experience_level in {"Beginner", "Intermediate"},
    ),
    PathRule(
        AI_INITIATIVES,
        lambda p: p.ai_experience == "Yes" and p.goal == "Work on AI projects",
    ),
    PathRule(
        AMBASSADOR,
        lambda p: p.blockchain_experience == "Yes" and p.goal == "Promote blockchain/Andromeda",
    ),
    PathRule(
        EXPLORER,
        lambda p: p.goal == "Learn Web3 basics" or p.experience_level == "Beginner",
    ),
)


def placeholder_url(path: str) -> str:
    return f"https://example.com/placeholder/{path.lower().replace(' ', '-')}"


class PathDeterminer:
    """Maps completed profiles to a community path and its landing page URL."""

    def __init__(self, path_urls: Mapping[str, str] | None = None, rules: tuple[PathRule, ...] = PATH_RULES):
        self.path_urls = dict(path_urls or {})
        self.rules = rules

    def url_for(self, path: str) -> str:
        url = self.path_urls.get(path)
        if not url:
            logger.warning("path_url_not_configured", path=path)
            return placeholder_url(path)
        return url

    def determine(self, profile: OnboardingProfile) -> PathResult:
        """Recommend a path for ``profile``. Never raises."""
        path = FALLBACK_PATH
        for rule in self.rules:
            try:
                matched = rule.matches(profile)
            except Exception as e:
                logger.warning("path_rule_failed", path=rule.path, error=str(e), error_type=type(e).__name__)
                continue
            if matched:
                path = rule.path
                break

        logger.info("path_determined", path=path, session_id=profile.session_id)
        return PathResult(
            recommended_path=path,
            recommended_path_url=self.url_for(path),
            description=PATH_DESCRIPTIONS.get(path),
        )


def recommendation_intro(name: str | None, path: str, goal: str | None) -> str:
    """Closing message shown alongside the recommendation."""
    greeting = f"Thanks, {name}!" if name else "Thanks!"
    goal_phrase = _GOAL_PHRASES.get(goal or "")
    if goal_phrase:
        return f"{greeting} Since you want to {goal_phrase}, we recommend the {path} path."
    return f"{greeting} Based on your answers, we recommend the {path} path."
