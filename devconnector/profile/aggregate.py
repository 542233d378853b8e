"""
Profile aggregate rules.

Pure functions that decide what a profile looks like after a field update or
an experience/education mutation. They work on ``Profile`` instances and
plain mappings and never touch a session, so the service layer owns loading,
persisting and retrying.

Field presence:
    Update payloads are mappings that contain only the keys the caller
    submitted. A missing key leaves the stored value alone. A key that is
    present with ``None`` or a blank string clears the stored value.
"""

import uuid
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timezone
from typing import Any

from devconnector.errors import ValidationError
from devconnector.models import SOCIAL_NETWORKS, Profile

SCALAR_FIELDS = ("company", "website", "location", "bio", "status", "github_username")

# Fields a brand-new profile must carry and an update may not clear
REQUIRED_PROFILE_FIELDS = (
    ("status", "Status is required"),
    ("skills", "Skills are required"),
)

EXPERIENCE_FIELDS = ("title", "company", "location", "from", "to", "current", "description")
EXPERIENCE_REQUIRED = (
    ("title", "Title is required"),
    ("company", "Company is required"),
    ("from", "From date is required"),
)

EDUCATION_FIELDS = ("school", "degree", "field_of_study", "from", "to", "current", "description")
EDUCATION_REQUIRED = (
    ("school", "School is required"),
    ("degree", "Degree is required"),
    ("field_of_study", "Field of study is required"),
    ("from", "From date is required"),
)


def _clean(value: Any) -> Any:
    """Trim strings; blank strings become None."""
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def parse_skills(raw: str | Iterable[str] | None) -> list[str]:
    """
    Split a comma-delimited skills string into an ordered list.

    Each piece is trimmed and blank pieces are dropped, so
    ``"Go, Rust ,TS"`` becomes ``["Go", "Rust", "TS"]``. A list is accepted
    too and cleaned the same way.
    """
    if raw is None:
        return []
    pieces = raw.split(",") if isinstance(raw, str) else raw
    return [piece.strip() for piece in pieces if piece and piece.strip()]


def apply_field_update(existing: Profile | None, fields: Mapping[str, Any]) -> dict[str, Any]:
    """
    Compute the field set to persist for a create-or-update request.

    Args:
        existing: The stored profile, or None when the profile is being created
        fields: Submitted fields only (scalars, ``skills`` and the flat social keys)

    Returns:
        Mapping of profile attribute to new value. Only attributes that change
        are included; ``social`` is returned merged over the stored mapping.

    Raises:
        ValidationError: A new profile lacks status/skills, or an update clears them.
    """
    update: dict[str, Any] = {}

    for name in SCALAR_FIELDS:
        if name in fields:
            update[name] = _clean(fields[name])

    if "skills" in fields:
        update["skills"] = parse_skills(fields["skills"])

    social_changes = {key: _clean(fields[key]) for key in SOCIAL_NETWORKS if key in fields}
    if social_changes:
        social = dict(existing.social or {}) if existing is not None else {}
        for key, value in social_changes.items():
            if value is None:
                social.pop(key, None)
            else:
                social[key] = value
        update["social"] = social

    errors = []
    for name, msg in REQUIRED_PROFILE_FIELDS:
        if existing is None:
            missing = not update.get(name)
        else:
            missing = name in update and not update[name]
        if missing:
            errors.append({"msg": msg, "param": name})
    if errors:
        raise ValidationError(errors)

    return update


def assign_fields(profile: Profile, update: Mapping[str, Any]) -> Profile:
    """Write an ``apply_field_update`` result onto a profile."""
    for name, value in update.items():
        setattr(profile, name, value)
    _touch(profile)
    return profile


def new_profile(owner_id: int, fields: Mapping[str, Any]) -> Profile:
    """Build a fresh, unsaved profile for ``owner_id`` from submitted fields."""
    update = apply_field_update(None, fields)
    return Profile(
        user_id=owner_id,
        skills=update.pop("skills"),
        social=update.pop("social", {}),
        experience=[],
        education=[],
        **update,
    )


# =============================================================================
# Experience / education collections
# =============================================================================


def _new_entry_id(taken: set[str]) -> str:
    entry_id = uuid.uuid4().hex
    while entry_id in taken:
        entry_id = uuid.uuid4().hex
    return entry_id


def _build_entry(
    entry: Mapping[str, Any],
    field_names: tuple[str, ...],
    required: tuple[tuple[str, str], ...],
    existing: list[dict[str, Any]],
) -> dict[str, Any]:
    errors = [
        {"msg": msg, "param": name} for name, msg in required if not _clean(entry.get(name))
    ]
    if errors:
        raise ValidationError(errors)

    record: dict[str, Any] = {"id": _new_entry_id({item["id"] for item in existing})}
    for name in field_names:
        if name == "current":
            record[name] = bool(entry.get(name, False))
        else:
            record[name] = _clean(entry.get(name))
    return record


def _without(entries: list[dict[str, Any]], entry_id: str) -> list[dict[str, Any]]:
    # Unknown ids leave the list as it was
    return [item for item in entries if item.get("id") != entry_id]


def _touch(profile: Profile) -> None:
    profile.updated_at = datetime.now(timezone.utc)


def append_experience(profile: Profile, entry: Mapping[str, Any]) -> Profile:
    """
    Insert a new experience entry at the front of ``profile.experience``.

    Raises:
        ValidationError: title, company or from is empty. The profile is left untouched.
    """
    current = list(profile.experience or [])
    record = _build_entry(entry, EXPERIENCE_FIELDS, EXPERIENCE_REQUIRED, current)
    profile.experience = [record, *current]
    _touch(profile)
    return profile


def remove_experience(profile: Profile, experience_id: str) -> Profile:
    """Remove the experience entry with ``experience_id``; no-op when absent."""
    profile.experience = _without(list(profile.experience or []), experience_id)
    _touch(profile)
    return profile


def append_education(profile: Profile, entry: Mapping[str, Any]) -> Profile:
    """
    Insert a new education entry at the front of ``profile.education``.

    Raises:
        ValidationError: school, degree, field_of_study or from is empty.
    """
    current = list(profile.education or [])
    record = _build_entry(entry, EDUCATION_FIELDS, EDUCATION_REQUIRED, current)
    profile.education = [record, *current]
    _touch(profile)
    return profile


def remove_education(profile: Profile, education_id: str) -> Profile:
    """Remove the education entry with ``education_id``; no-op when absent."""
    profile.education = _without(list(profile.education or []), education_id)
    _touch(profile)
    return profile
