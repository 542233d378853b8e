"""
Profile endpoints.

Domain errors raised by the service (NotFound, ValidationError, Remote*)
are turned into responses by the handlers in ``error_handlers``.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from devconnector.github import GitHubRepositoryLookup, RepositorySummary
from devconnector.logging import get_logger

from ..auth.dependencies import get_current_user
from ..database import get_db
from ..dependencies import get_repository_lookup
from ..models import Profile, User
from ..schemas import (
    EducationRequest,
    ExperienceRequest,
    MessageResponse,
    ProfileResponse,
    ProfileUpsertRequest,
)
from ..services import profile_service

logger = get_logger("profile")

router = APIRouter(prefix="/profile", tags=["profile"])


def _profile_to_response(profile: Profile) -> ProfileResponse:
    """Convert a Profile to its response while the session is still open."""
    return ProfileResponse.model_validate(profile)


@router.get("/me", response_model=ProfileResponse)
def get_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get current user's profile."""
    return _profile_to_response(profile_service.get_own_profile(db, current_user.id))


@router.post("", response_model=ProfileResponse)
def create_or_update_profile(
    payload: ProfileUpsertRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create or update the current user's profile.

    Only the fields present in the body are applied.
    """
    fields = payload.model_dump(exclude_unset=True)
    profile = profile_service.create_or_update_profile(db, current_user.id, fields)
    return _profile_to_response(profile)


@router.get("", response_model=list[ProfileResponse])
def list_profiles(db: Session = Depends(get_db)):
    """Get all profiles (public)."""
    return [_profile_to_response(p) for p in profile_service.get_all_profiles(db)]


@router.get("/user/{user_id}", response_model=ProfileResponse)
def get_profile_by_user(user_id: str, db: Session = Depends(get_db)):
    """Get a profile by its owner's user ID (public)."""
    return _profile_to_response(profile_service.get_profile_by_user_id(db, user_id))


@router.delete("", response_model=MessageResponse)
def delete_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete the current user's profile. Succeeds when there is none."""
    profile_service.delete_profile(db, current_user.id)
    return MessageResponse(msg="Profile deleted")


@router.put("/experience", response_model=ProfileResponse)
def add_experience(
    payload: ExperienceRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Add an experience entry at the top of the current user's profile."""
    profile = profile_service.add_experience(db, current_user.id, payload.model_dump(by_alias=True))
    return _profile_to_response(profile)


@router.delete("/experience/{exp_id}", response_model=ProfileResponse)
def delete_experience(
    exp_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Remove an experience entry from the current user's profile."""
    return _profile_to_response(profile_service.remove_experience_entry(db, current_user.id, exp_id))


@router.put("/education", response_model=ProfileResponse)
def add_education(
    payload: EducationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Add an education entry at the top of the current user's profile."""
    profile = profile_service.add_education(db, current_user.id, payload.model_dump(by_alias=True))
    return _profile_to_response(profile)


@router.delete("/education/{edu_id}", response_model=ProfileResponse)
def delete_education(
    edu_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Remove an education entry from the current user's profile."""
    return _profile_to_response(profile_service.remove_education_entry(db, current_user.id, edu_id))


@router.get("/github/{username}", response_model=list[RepositorySummary])
def get_github_repositories(
    username: str,
    lookup: GitHubRepositoryLookup = Depends(get_repository_lookup),
):
    """List a GitHub user's public repositories (public)."""
    repositories = profile_service.fetch_remote_repositories(username, lookup=lookup)
    logger.debug("github_repositories_listed", username=username, count=len(repositories))
    return repositories
