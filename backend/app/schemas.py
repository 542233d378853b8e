"""
Pydantic schemas for request and response validation.
"""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, EmailStr, Field


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDateTime = Annotated[datetime | None, AfterValidator(_as_utc)]


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    msg: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    avatar: str | None = None
    is_active: bool = False


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class ActivateRequest(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class OwnerResponse(BaseModel):
    """Display fields of the account that owns a profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    avatar: str | None = None


class ProfileUpsertRequest(BaseModel):
    """
    Create-or-update payload.

    Every field is optional; only the fields present in the request body are
    applied. ``skills`` is a comma-separated string ("Go, Rust, TS").
    """

    model_config = ConfigDict(extra="ignore")

    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    status: str | None = None
    github_username: str | None = Field(
        default=None, validation_alias=AliasChoices("github_username", "githubusername")
    )
    skills: str | list[str] | None = None

    youtube: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    instagram: str | None = None
    linkedin: str | None = None


class ExperienceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    company: str
    location: str | None = None
    from_: str = Field(alias="from")
    to: str | None = None
    current: bool = False
    description: str | None = None


class EducationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    school: str
    degree: str
    field_of_study: str = Field(validation_alias=AliasChoices("field_of_study", "fieldofstudy"))
    from_: str = Field(alias="from")
    to: str | None = None
    current: bool = False
    description: str | None = None


class ExperienceResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    company: str
    location: str | None = None
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    current: bool = False
    description: str | None = None


class EducationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    school: str
    degree: str
    field_of_study: str
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    current: bool = False
    description: str | None = None


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user: OwnerResponse | None = None
    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    status: str | None = None
    github_username: str | None = None
    skills: list[str] = Field(default_factory=list)
    social: dict[str, str] = Field(default_factory=dict)
    experience: list[ExperienceResponse] = Field(default_factory=list)
    education: list[EducationResponse] = Field(default_factory=list)
    created_at: UtcDateTime = None
    updated_at: UtcDateTime = None
