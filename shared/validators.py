"""
Input validators — framework-agnostic, pure functions.

Each validator raises errors.ValidationError with the offending field set,
so services can call them and let the error handler shape the response.
"""

from __future__ import annotations

import os
import re
from typing import Optional, Sequence

from email_validator import EmailNotValidError, validate_email as _validate_email

from errors import ValidationError

MIN_PASSWORD_LENGTH = 6

_SAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


def normalize_email(email: str) -> str:
    """Trim and lower-case *email*; emails are compared in this form everywhere."""
    return (email or "").strip().lower()


def validate_email(email: Optional[str]) -> str:
    """Return the normalised email or raise ValidationError."""
    normalized = normalize_email(email or "")
    if not normalized:
        raise ValidationError("Email is required", field="email")
    try:
        _validate_email(normalized, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email address: {e}", field="email") from e
    return normalized


def require_fields(**fields: Optional[str]) -> None:
    """Raise ValidationError naming the first blank field."""
    for name, value in fields.items():
        if value is None or not str(value).strip():
            raise ValidationError("Missing required fields", field=name)


def validate_password(password: Optional[str], *, field: str = "password") -> str:
    if not password:
        raise ValidationError("Password is required", field=field)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            field=field,
        )
    return password


def validate_photo(
    content_type: Optional[str],
    size: int,
    *,
    allowed_types: Sequence[str],
    max_bytes: int,
) -> None:
    """Validate an uploaded agent photo (required, image type, bounded size)."""
    if size <= 0:
        raise ValidationError("Photo is required", field="photo")
    if content_type not in allowed_types:
        raise ValidationError(
            "Photo must be an image",
            field="photo",
            details={"allowed_types": list(allowed_types)},
        )
    if size > max_bytes:
        raise ValidationError(
            "Photo is too large",
            field="photo",
            details={"max_bytes": max_bytes},
        )


def sanitize_filename(filename: Optional[str], default: str = "photo") -> str:
    """Strip any directory part and unsafe characters from an uploaded filename."""
    base = os.path.basename((filename or "").replace("\\", "/"))
    cleaned = _SAFE_FILENAME.sub("_", base).strip("._")
    return cleaned or default
