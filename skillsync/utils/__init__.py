"""skillsync utilities."""

from skillsync.utils.helpers import (
    generate_uuid,
    join_relative,
    now_utc,
    strip_file_scheme,
    truncate_string,
)
from skillsync.utils.logging import get_logger, setup_logging

__all__ = [
    "generate_uuid",
    "now_utc",
    "truncate_string",
    "strip_file_scheme",
    "join_relative",
    "setup_logging",
    "get_logger",
]
