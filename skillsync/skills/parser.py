"""SKILL.md metadata parser.

The metadata block holds flat ``key: value`` lines plus ``key: |`` literal
blocks.
"""

from __future__ import annotations

import re

from skillsync.errors import MissingField, MissingMetadataBlock
from skillsync.skills.models import DEFAULT_VERSION, Origin, SkillPackage

# Metadata block delimited by '---' lines at the very start of the file
FRONTMATTER_RE = re.compile(r"\A---\s*\n(.*?)\n---", re.DOTALL)

REQUIRED_FIELDS = ("name", "description")


def extract_frontmatter(content: str) -> str | None:
    """Return the raw text between the metadata delimiters, or None."""
    match = FRONTMATTER_RE.match(content)
    if not match:
        return None
    return match.group(1)


def _is_indented(line: str) -> bool:
    return line.startswith((" ", "\t"))


def parse_frontmatter(content: str) -> dict[str, str]:
    """Parse the metadata block of a SKILL.md file into a flat mapping.

    Args:
        content: Full SKILL.md text

    Returns:
        Key/value pairs. Single-line keys with empty values are left out;
        a ``key: |`` block with no lines maps to an empty string.

    Raises:
        MissingMetadataBlock: The file does not start with a metadata block
    """
    block = extract_frontmatter(content)
    if block is None:
        raise MissingMetadataBlock()

    result: dict[str, str] = {}
    multiline_key: str | None = None
    collected: list[str] = []

    def flush() -> None:
        value = "\n".join(collected).strip()
        if multiline_key is not None:
            result[multiline_key] = value

    for line in block.splitlines():
        if multiline_key is not None:
            if _is_indented(line) or ":" not in line:
                stripped = line.strip(" \t")
                if stripped:
                    collected.append(stripped)
                continue
            flush()
            multiline_key = None
            collected = []

        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        if value == "|":
            multiline_key = key
            collected = []
        elif value:
            result[key] = value

    if multiline_key is not None:
        flush()

    return result


def parse_skill(
    content: str,
    local_id: str,
    origin: Origin,
    origin_sub_path: str | None = None,
) -> SkillPackage:
    """Parse SKILL.md content into a SkillPackage.

    ``content`` is kept verbatim on the result; installs write it back
    byte for byte.

    Raises:
        MissingMetadataBlock: No metadata block
        MissingField: ``name`` or ``description`` absent
    """
    metadata = parse_frontmatter(content)
    for field in REQUIRED_FIELDS:
        if field not in metadata:
            raise MissingField(field)

    return SkillPackage(
        local_id=local_id,
        name=metadata["name"],
        description=metadata["description"],
        version=metadata.get("version", DEFAULT_VERSION),
        content=content,
        origin=origin,
        origin_sub_path=origin_sub_path or None,
    )
