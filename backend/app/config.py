"""
Application configuration using Pydantic settings.

Re-exports the unified devconnector.config module for the backend package.
"""

from devconnector.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
