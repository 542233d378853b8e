"""
SQLAlchemy ORM models for the DevConnector backend.

Re-exports all models from the devconnector.models package.
"""

from devconnector.models import Base, Profile, TokenBlacklist, User

__all__ = [
    "Base",
    "User",
    "TokenBlacklist",
    "Profile",
]
