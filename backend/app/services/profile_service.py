"""
Profile management service functions.

Every write is a load-mutate-persist cycle run by ``_write``. The profiles
table is versioned (``version_id_col``), so an UPDATE only lands if nobody
else committed in between; a racing first insert trips the unique
``user_id`` constraint. Either way the cycle is rolled back and re-run on top
of the winner's committed state.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from devconnector.errors import NotFound, StorageFault
from devconnector.github import GitHubRepositoryLookup, RepositorySummary
from devconnector.logging import LogContext, get_logger
from devconnector.profile import aggregate
from devconnector.repositories import ProfileRepository

from ..config import get_settings
from ..models import Profile

logger = get_logger("profile")

T = TypeVar("T")

# Plain decimal ids; no sign, whitespace or "_" separators
_USER_ID = re.compile(r"[0-9]+")

# Largest id the database integer column can hold
_MAX_ID = 2**63 - 1


def _write(db: Session, user_id: int, operation: str, mutate: Callable[[ProfileRepository], T]) -> T:
    """
    Run ``mutate`` and commit, retrying on write conflicts.

    Raises:
        StorageFault: The store failed, or every attempt lost a race.
    """
    attempts = get_settings().profile_write_attempts

    with LogContext(user_id=user_id, operation=operation):
        for attempt in range(1, attempts + 1):
            try:
                result = mutate(ProfileRepository(db))
                db.commit()
                return result
            except (StaleDataError, IntegrityError) as e:
                db.rollback()
                logger.info("profile_write_conflict", attempt=attempt, error_type=type(e).__name__)
            except SQLAlchemyError as e:
                db.rollback()
                logger.exception("profile_write_failed")
                raise StorageFault() from e

        logger.error("profile_write_attempts_exhausted", attempts=attempts)
    raise StorageFault()


def _require_profile(repo: ProfileRepository, user_id: int) -> Profile:
    profile = repo.get_by_user_id(user_id)
    if profile is None:
        raise NotFound("There is no profile for this user")
    return profile


def _read(operation: str, load: Callable[[], T]) -> T:
    try:
        return load()
    except SQLAlchemyError as e:
        logger.exception("profile_read_failed", operation=operation)
        raise StorageFault() from e


# =============================================================================
# Reads
# =============================================================================


def get_own_profile(db: Session, user_id: int) -> Profile:
    """Load the caller's profile with owner display fields."""
    profile = _read("get_own_profile", lambda: ProfileRepository(db).get_by_user_id(user_id, with_owner=True))
    if profile is None:
        raise NotFound("There is no profile for this user")
    return profile


def get_all_profiles(db: Session) -> list[Profile]:
    """Every stored profile with owner display fields."""
    return _read("get_all_profiles", lambda: ProfileRepository(db).get_all_with_owners())


def get_profile_by_user_id(db: Session, raw_user_id: int | str) -> Profile:
    """
    Load any user's profile.

    Identifiers that are not plain positive decimal integers resolve to NotFound rather
    than reaching the database.
    """
    raw = "" if raw_user_id is None else str(raw_user_id)
    if not _USER_ID.fullmatch(raw):
        raise NotFound()
    user_id = int(raw)
    if not 0 < user_id <= _MAX_ID:
        raise NotFound()

    profile = _read(
        "get_profile_by_user_id",
        lambda: ProfileRepository(db).get_by_user_id(user_id, with_owner=True),
    )
    if profile is None:
        raise NotFound()
    return profile


# =============================================================================
# Writes
# =============================================================================


def create_or_update_profile(db: Session, user_id: int, fields: Mapping[str, Any]) -> Profile:
    """
    Upsert the user's profile from the submitted fields.

    Args:
        fields: Only the keys the caller submitted; absent keys keep their stored value.
    """

    def mutate(repo: ProfileRepository) -> Profile:
        profile = repo.get_by_user_id(user_id)
        if profile is None:
            return repo.insert(aggregate.new_profile(user_id, fields))
        aggregate.assign_fields(profile, aggregate.apply_field_update(profile, fields))
        return repo.replace(profile)

    profile = _write(db, user_id, "create_or_update_profile", mutate)
    logger.info(
        "profile_saved",
        user_id=user_id,
        created=profile.version == 1,
        fields=sorted(fields),
    )
    return profile


def delete_profile(db: Session, user_id: int) -> bool:
    """Delete the user's profile. Returns False (not an error) when there was none."""
    deleted = _write(db, user_id, "delete_profile", lambda repo: repo.delete_by_owner(user_id))
    logger.info("profile_deleted", user_id=user_id, existed=deleted)
    return deleted


def add_experience(db: Session, user_id: int, entry: Mapping[str, Any]) -> Profile:
    def mutate(repo: ProfileRepository) -> Profile:
        profile = _require_profile(repo, user_id)
        aggregate.append_experience(profile, entry)
        return repo.replace(profile)

    profile = _write(db, user_id, "add_experience", mutate)
    logger.info("experience_added", user_id=user_id, experience_id=profile.experience[0]["id"])
    return profile


def remove_experience_entry(db: Session, user_id: int, experience_id: str) -> Profile:
    """Remove an experience entry; an unknown id leaves the profile as it was."""

    def mutate(repo: ProfileRepository) -> Profile:
        profile = _require_profile(repo, user_id)
        aggregate.remove_experience(profile, experience_id)
        return repo.replace(profile)

    profile = _write(db, user_id, "remove_experience", mutate)
    logger.info("experience_removed", user_id=user_id, experience_id=experience_id)
    return profile


def add_education(db: Session, user_id: int, entry: Mapping[str, Any]) -> Profile:
    def mutate(repo: ProfileRepository) -> Profile:
        profile = _require_profile(repo, user_id)
        aggregate.append_education(profile, entry)
        return repo.replace(profile)

    profile = _write(db, user_id, "add_education", mutate)
    logger.info("education_added", user_id=user_id, education_id=profile.education[0]["id"])
    return profile


def remove_education_entry(db: Session, user_id: int, education_id: str) -> Profile:
    """Remove an education entry; an unknown id leaves the profile as it was."""

    def mutate(repo: ProfileRepository) -> Profile:
        profile = _require_profile(repo, user_id)
        aggregate.remove_education(profile, education_id)
        return repo.replace(profile)

    profile = _write(db, user_id, "remove_education", mutate)
    logger.info("education_removed", user_id=user_id, education_id=education_id)
    return profile


# =============================================================================
# GitHub passthrough
# =============================================================================


def fetch_remote_repositories(
    username: str,
    lookup: GitHubRepositoryLookup | None = None,
    timeout: float | None = None,
) -> list[RepositorySummary]:
    """
    List a GitHub user's repositories.

    Raises:
        RemoteNotFound: GitHub has no such user
        RemoteUnavailable: GitHub could not be reached
    """
    lookup = lookup or GitHubRepositoryLookup(get_settings())
    return lookup.list_repositories(username, timeout=timeout)
