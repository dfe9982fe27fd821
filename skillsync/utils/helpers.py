"""Utility functions for skillsync."""

import uuid
from datetime import datetime, timezone


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def truncate_string(s: str, max_length: int = 200) -> str:
    """Truncate string to max length with ellipsis."""
    if len(s) <= max_length:
        return s
    return s[:max_length - 3] + "..."


def strip_file_scheme(path: str) -> str:
    """Turn a ``file://`` URL into a plain path; other strings pass through."""
    if path.startswith("file://"):
        return path[len("file://"):]
    return path


def join_relative(*parts: str | None) -> str:
    """Join relative path fragments with '/', dropping empty ones.

    Examples:
        join_relative("skills", "foo")     -> "skills/foo"
        join_relative(None, "foo")         -> "foo"
        join_relative("a/", "", "/b")      -> "a/b"
    """
    cleaned = [p.strip("/") for p in parts if p and p.strip("/")]
    return "/".join(cleaned)
