"""Editing of locally installed skills."""

from __future__ import annotations

from skillsync.errors import NotEditableError, SkillNotFoundError, SkillWriteFailed
from skillsync.fs import FileSystem, LocalFileSystem
from skillsync.skills.models import LocalOrigin, SkillPackage
from skillsync.skills.parser import parse_skill
from skillsync.skills.providers import ProviderPathResolver
from skillsync.skills.scanner import SKILL_FILENAME
from skillsync.utils import get_logger

logger = get_logger(__name__)


class LocalSkillWriter:
    """Overwrites the SKILL.md of a skill installed for a provider."""

    def __init__(self, resolver: ProviderPathResolver, fs: FileSystem | None = None) -> None:
        self.resolver = resolver
        self.fs = fs or LocalFileSystem()

    def save(self, skill: SkillPackage, content: str) -> SkillPackage:
        """Replace the SKILL.md content of a local skill.

        The new content is parsed before anything is written, so an invalid
        edit leaves the file untouched.

        Returns:
            The re-parsed skill, keeping origin, identity and installation state

        Raises:
            NotEditableError: The skill is not a local skill
            SkillNotFoundError: The skill's SKILL.md does not exist
            SkillParseError: ``content`` is not a valid SKILL.md
            SkillWriteFailed: The file could not be written
        """
        origin = skill.origin
        if not isinstance(origin, LocalOrigin):
            raise NotEditableError(skill.display_id)

        path = self.resolver.skills_path(origin.provider) / skill.local_id / SKILL_FILENAME
        if not self.fs.exists(path):
            raise SkillNotFoundError(str(path))

        parsed = parse_skill(content, skill.local_id, origin, skill.origin_sub_path)

        try:
            self.fs.write_text(path, content)
        except OSError as e:
            raise SkillWriteFailed(str(path)) from e

        logger.info("Saved skill", extra={"skill": skill.display_id, "path": str(path)})
        return skill.model_copy(update={
            "name": parsed.name,
            "description": parsed.description,
            "version": parsed.version,
            "content": content,
        })
