"""
DevConnector Core Library.

This package provides the core functionality for the DevConnector API,
including database management, models, repositories, the profile
aggregate rules, the GitHub repository lookup and logging.

Usage:
    # Database
    from devconnector.db import db, get_db
    from devconnector.models import User, Profile
    from devconnector.repositories import ProfileRepository, UserRepository

    # Profile rules
    from devconnector.profile import aggregate

    # Config
    from devconnector.config import get_settings, Settings

    # Logging
    from devconnector.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

# Lazy imports to avoid circular dependencies
# Users should import directly from submodules:
#   from devconnector.db import db
#   from devconnector.config import get_settings
#   from devconnector.logging import get_logger
