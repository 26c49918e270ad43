"""Database package: SQLAlchemy base, engine/session factory, and Redis client."""

from onboarding_wizard.db.base import Base, create_engine, create_session_factory, create_tables
from onboarding_wizard.db.redis import create_redis

__all__ = [
    "Base",
    "create_engine",
    "create_redis",
    "create_session_factory",
    "create_tables",
]
