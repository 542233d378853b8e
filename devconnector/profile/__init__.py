# Profile aggregate rules

from .aggregate import (
    append_education,
    append_experience,
    apply_field_update,
    assign_fields,
    new_profile,
    parse_skills,
    remove_education,
    remove_experience,
)

__all__ = [
    "append_education",
    "append_experience",
    "apply_field_update",
    "assign_fields",
    "new_profile",
    "parse_skills",
    "remove_education",
    "remove_experience",
]
