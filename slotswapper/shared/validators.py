"""Shared validation utilities"""

import re
from datetime import datetime, timezone
from typing import Optional

MIN_PASSWORD_LENGTH = 6


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_password(password: str) -> str:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def validate_required_text(value: Optional[str], field_name: str = "Title") -> Optional[str]:
    """Strip surrounding whitespace and reject values that are empty afterwards"""
    if value is None:
        return value

    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} cannot be blank")
    return value


def validate_time_range(start: Optional[datetime], end: Optional[datetime]) -> None:
    """
    Validate that a slot ends after it starts.

    Either bound may be None when only one side is being changed; the check
    then happens against the stored value in the service layer.

    Raises:
        ValueError: If end is not after start
    """
    if start is None or end is None:
        return

    if end <= start:
        raise ValueError("endTime must be after startTime")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an offset-aware datetime to naive UTC, the form slot times are stored in"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
