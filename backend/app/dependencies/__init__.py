"""
FastAPI dependency injection module.

Provides dependencies for external collaborators so routes can have them
swapped out in tests.
"""

from devconnector.github import GitHubRepositoryLookup

from ..config import get_settings


def get_repository_lookup() -> GitHubRepositoryLookup:
    """GitHub repository lookup configured from settings."""
    return GitHubRepositoryLookup(get_settings())


__all__ = ["get_repository_lookup"]
