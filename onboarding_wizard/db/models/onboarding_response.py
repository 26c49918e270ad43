"""OnboardingResponse model: one completed onboarding profile per email."""

from sqlalchemy import Column, DateTime, Integer, JSON, String, Text, func

from onboarding_wizard.db.base import Base


class OnboardingResponse(Base):
    __tablename__ = "onboarding_responses"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity / contact
    name = Column(String(255), nullable=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    telegram = Column(String(64), nullable=True)
    github = Column(String(64), nullable=True)
    x_handle = Column(String(64), nullable=True)

    # Technical signal
    languages = Column(JSON(none_as_null=True), nullable=True)  # list[str]
    other_languages = Column(Text, nullable=True)
    blockchain_experience = Column(String(50), nullable=True)
    blockchain_platforms = Column(JSON(none_as_null=True), nullable=True)  # list[str]
    ai_experience = Column(String(50), nullable=True)
    ai_ml_areas = Column(Text, nullable=True)
    tools_familiarity = Column(String(50), nullable=True)
    experience_level = Column(String(50), nullable=True)

    # Engagement
    hackathon = Column(JSON(none_as_null=True), nullable=True)  # list[str]
    goal = Column(String(100), nullable=True)
    portfolio = Column(Text, nullable=True)
    additional_skills = Column(Text, nullable=True)

    # Recommendation
    recommended_path = Column(String(50), nullable=True)
    recommended_path_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
