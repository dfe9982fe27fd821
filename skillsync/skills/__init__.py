"""Skill packages: data model, SKILL.md parsing and directory scanning.

Engine services (installer, library, catalogs) live in their own modules
under this package and are imported from there.
"""

from skillsync.skills.models import (
    LocalDirectoryOrigin,
    LocalOrigin,
    Origin,
    RemoteOrigin,
    RemoteRepositoryReference,
    ScannedPackage,
    SkillPackage,
)
from skillsync.skills.parser import parse_frontmatter, parse_skill
from skillsync.skills.scanner import count_auxiliary_files, scan_packages

__all__ = [
    "SkillPackage",
    "Origin",
    "LocalOrigin",
    "RemoteOrigin",
    "LocalDirectoryOrigin",
    "RemoteRepositoryReference",
    "ScannedPackage",
    "parse_frontmatter",
    "parse_skill",
    "scan_packages",
    "count_auxiliary_files",
]
