"""
utils.py — Shared helpers: username handling, date math.
"""

import re
from datetime import datetime, timezone

from config import GITHUB_USERNAME_REGEX


# ─── Username Helpers ─────────────────────────────────────────────────────────

def normalize_username(username: str) -> str:
    """Cache key for a username: surrounding whitespace removed, case-folded."""
    return username.strip().casefold()


def validate_github_username(username: str) -> tuple[bool, str]:
    """
    Validate a GitHub username.
    Returns (is_valid: bool, error_message: str).
    """
    username = username.strip()
    if not username:
        return False, "Username cannot be empty."
    if not re.match(GITHUB_USERNAME_REGEX, username):
        return False, (
            "Invalid GitHub username. Must be 1–39 characters, "
            "letters, numbers, or hyphens only."
        )
    if username.startswith("-") or username.endswith("-"):
        return False, "GitHub username cannot start or end with a hyphen."
    return True, ""


# ─── Date Helpers ─────────────────────────────────────────────────────────────

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_github_date(date_str: str | None) -> datetime | None:
    """Parse a GitHub ISO-8601 date string to a timezone-aware datetime."""
    if not date_str:
        return None
    try:
        return datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except ValueError:
        return None


def days_since(date_str: str | None) -> float:
    """Return the number of days between now and a GitHub date string."""
    dt = parse_github_date(date_str)
    if dt is None:
        return 0.0
    return max((utc_now() - dt).total_seconds() / 86400, 0.0)
