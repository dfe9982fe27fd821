"""Tests for SKILL.md metadata parsing."""

from __future__ import annotations

import pytest

from skillsync.errors import MissingField, MissingMetadataBlock, SkillParseError
from skillsync.skills.models import LocalOrigin, RemoteOrigin
from skillsync.skills.parser import extract_frontmatter, parse_frontmatter, parse_skill

ORIGIN = LocalOrigin(provider="claude")


class TestParseFrontmatter:
    def test_flat_keys(self):
        meta = parse_frontmatter("---\nname: pdf\ndescription: Work with PDFs\n---\nbody")
        assert meta == {"name": "pdf", "description": "Work with PDFs"}

    def test_splits_on_first_colon(self):
        meta = parse_frontmatter("---\nname: pdf\ndescription: Use when: reading files\n---\n")
        assert meta["description"] == "Use when: reading files"

    def test_empty_values_are_ignored(self):
        meta = parse_frontmatter("---\nname:\ndescription: y\n---\n")
        assert "name" not in meta

    def test_trailing_spaces_after_opening_delimiter(self):
        meta = parse_frontmatter("---   \nname: x\ndescription: y\n---\n")
        assert meta["name"] == "x"

    def test_multiline_value(self):
        content = (
            "---\n"
            "name: x\n"
            "description: |\n"
            "  First line.\n"
            "  Second line.\n"
            "    Third line.\n"
            "---\n"
        )
        meta = parse_frontmatter(content)
        assert meta["description"] == "First line.\nSecond line.\nThird line."

    def test_multiline_ends_at_unindented_key(self):
        content = "---\nname: x\ndescription: |\n  one\n  two\nversion: 2.0.0\n---\n"
        meta = parse_frontmatter(content)
        assert meta["description"] == "one\ntwo"
        assert meta["version"] == "2.0.0"

    def test_multiline_collects_unindented_lines_without_colon(self):
        content = "---\nname: x\ndescription: |\nplain text\n\n  more\n---\n"
        assert parse_frontmatter(content)["description"] == "plain text\nmore"

    def test_empty_multiline_value_is_kept(self):
        content = "---\nname: x\ndescription: |\nversion: 1.2.0\n---\n"
        meta = parse_frontmatter(content)
        assert meta["description"] == ""
        assert meta["version"] == "1.2.0"

    def test_block_must_start_the_file(self):
        with pytest.raises(MissingMetadataBlock):
            parse_frontmatter("\n---\nname: x\n---\n")

    def test_no_block(self):
        assert extract_frontmatter("# Just markdown\n") is None
        with pytest.raises(MissingMetadataBlock):
            parse_frontmatter("# Just markdown\n")


class TestParseSkill:
    def test_minimal_package(self):
        content = "---\nname: x\ndescription: y\n---\nbody"
        skill = parse_skill(content, "x", ORIGIN)

        assert skill.name == "x"
        assert skill.description == "y"
        assert skill.version == "1.0.0"
        assert skill.content == content
        assert skill.local_id == "x"
        assert skill.origin == ORIGIN
        assert skill.installed_providers == frozenset()

    def test_version_is_read(self):
        skill = parse_skill("---\nname: x\ndescription: y\nversion: 2.1.0\n---\n", "x", ORIGIN)
        assert skill.version == "2.1.0"

    @pytest.mark.parametrize("content", [
        "---\nname: x\ndescription: y\n---\nbody",
        "---\nname: pdf\ndescription: Work with: PDFs\nversion: 3\n---\n\n# PDF\n\n```yaml\nkey: value\n```\n",
        "---\r\nname: crlf\r\ndescription: windows line endings\r\n---\r\nbody\r\n",
    ])
    def test_content_is_kept_verbatim(self, content):
        assert parse_skill(content, "id", ORIGIN).content == content

    def test_missing_name(self):
        with pytest.raises(MissingField) as exc_info:
            parse_skill("---\ndescription: y\n---\n", "x", ORIGIN)
        assert exc_info.value.field == "name"

    def test_missing_description(self):
        with pytest.raises(MissingField) as exc_info:
            parse_skill("---\nname: x\n---\n", "x", ORIGIN)
        assert exc_info.value.field == "description"

    def test_empty_description_block_is_accepted(self):
        skill = parse_skill("---\nname: x\ndescription: |\n---\n", "x", ORIGIN)
        assert skill.description == ""

    def test_parse_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            parse_skill("no metadata", "x", ORIGIN)
        assert issubclass(MissingField, SkillParseError)

    def test_sub_path(self):
        skill = parse_skill("---\nname: x\ndescription: y\n---\n", "x", RemoteOrigin(repo_url="https://github.com/o/r"), "skills")
        assert skill.origin_sub_path == "skills"
        assert skill.display_id == "skills/x"

    def test_empty_sub_path_is_none(self):
        skill = parse_skill("---\nname: x\ndescription: y\n---\n", "x", ORIGIN, "")
        assert skill.origin_sub_path is None
        assert skill.display_id == "x"
