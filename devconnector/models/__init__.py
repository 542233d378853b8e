"""
SQLAlchemy models for DevConnector.

Single source of truth for all database models.

Usage:
    from devconnector.models import User, Profile
"""

from .base import Base
from .profile import SOCIAL_NETWORKS, Profile
from .user import TokenBlacklist, User

__all__ = [
    # Base
    "Base",
    # User
    "User",
    "TokenBlacklist",
    # Profile
    "Profile",
    "SOCIAL_NETWORKS",
]
