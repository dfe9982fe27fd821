"""Tests for editing locally installed skills."""

from __future__ import annotations

import errno

import pytest

from skillsync.errors import MissingField, NotEditableError, SkillNotFoundError, SkillWriteFailed
from skillsync.fs import MemoryFileSystem
from skillsync.skills.models import LocalOrigin, RemoteOrigin
from skillsync.skills.parser import parse_skill
from skillsync.skills.writer import LocalSkillWriter

from tests.conftest import CLAUDE_ROOT, skill_md

PATH = f"{CLAUDE_ROOT}/pdf/SKILL.md"


class ReadOnlyFileSystem(MemoryFileSystem):
    locked = False

    def write_bytes(self, path, data) -> None:
        if self.locked:
            raise PermissionError(errno.EACCES, "Permission denied", str(path))
        super().write_bytes(path, data)


def local_skill():
    skill = parse_skill(skill_md("pdf"), "pdf", LocalOrigin(provider="claude"), "skills")
    return skill.model_copy(update={"installed_providers": frozenset({"claude", "codex"})})


class TestLocalSkillWriter:
    def test_save_rewrites_and_reparses(self, fs, resolver):
        fs.add_file(PATH, skill_md("pdf"))
        new_content = skill_md("pdf tools", "Edited description", version="1.1.0")

        saved = LocalSkillWriter(resolver, fs).save(local_skill(), new_content)

        assert fs.read_text(PATH) == new_content
        assert saved.name == "pdf tools"
        assert saved.description == "Edited description"
        assert saved.version == "1.1.0"
        assert saved.content == new_content
        assert saved.display_id == "skills/pdf"
        assert saved.installed_providers == {"claude", "codex"}

    def test_remote_skill_not_editable(self, fs, resolver):
        skill = parse_skill(skill_md("pdf"), "pdf", RemoteOrigin(repo_url="https://github.com/o/r"))
        with pytest.raises(NotEditableError):
            LocalSkillWriter(resolver, fs).save(skill, skill_md("pdf"))

    def test_missing_file(self, fs, resolver):
        with pytest.raises(SkillNotFoundError):
            LocalSkillWriter(resolver, fs).save(local_skill(), skill_md("pdf"))

    def test_invalid_content_leaves_file_untouched(self, fs, resolver):
        fs.add_file(PATH, skill_md("pdf"))
        with pytest.raises(MissingField):
            LocalSkillWriter(resolver, fs).save(local_skill(), "---\nname: pdf\n---\n")
        assert fs.read_text(PATH) == skill_md("pdf")

    def test_write_failure(self, resolver):
        fs = ReadOnlyFileSystem()
        fs.add_file(PATH, skill_md("pdf"))
        fs.locked = True

        with pytest.raises(SkillWriteFailed):
            LocalSkillWriter(resolver, fs).save(local_skill(), skill_md("pdf", "new"))
