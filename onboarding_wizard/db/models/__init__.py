"""Re-export all models so Base.metadata sees them."""

from onboarding_wizard.db.models.onboarding_response import OnboardingResponse

__all__ = [
    "OnboardingResponse",
]
