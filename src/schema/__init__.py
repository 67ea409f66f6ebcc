"""Schema validation for raw people profiles.

Validates profile records against schemas/profile.json before they are
turned into Person objects.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


def _schema_dir() -> Path:
    """Return path to schemas directory."""
    return Path(__file__).resolve().parents[2] / "schemas"


@lru_cache(maxsize=1)
def _load_schema() -> dict:
    """Load the profile JSON schema."""
    schema_path = _schema_dir() / "profile.json"
    with open(schema_path, encoding="utf-8") as f:
        return json.load(f)


def validate_profile(data: Any) -> None:
    """Validate a raw profile record.

    Args:
        data: Raw profile dictionary

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(data, dict):
        raise ValidationError("Validation failed: profile must be an object")

    basic_info = data.get("basic_info")
    if not isinstance(basic_info, dict) or not basic_info.get("public_identifier"):
        raise ValidationError("Missing basic_info or public_identifier")

    try:
        jsonschema.validate(data, _load_schema())
    except jsonschema.ValidationError as e:
        field = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "profile"
        raise ValidationError(f"Validation failed for {field}: {e.message}") from e


def is_valid_profile(data: Any) -> bool:
    """Return True when the record passes validate_profile()."""
    try:
        validate_profile(data)
    except ValidationError:
        return False
    return True
