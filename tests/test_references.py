"""Tests for remote repository references."""

from __future__ import annotations

import json

import pytest

from skillsync.errors import DuplicateRepositoryError, InvalidRepositoryURL, RepositoryNotFound
from skillsync.fs import MemoryFileSystem
from skillsync.skills.references import (
    DEFAULT_REPOSITORY_ID,
    DEFAULT_REPOSITORY_URL,
    RepositoryStore,
    extract_repository_name,
    normalize_repository_url,
    parse_github_url,
    validate_repository_url,
)

STORE_PATH = "/home/user/.skillsync/repositories.json"


@pytest.fixture
def store(fs: MemoryFileSystem) -> RepositoryStore:
    return RepositoryStore(STORE_PATH, fs=fs)


class TestValidation:
    @pytest.mark.parametrize("url", [
        "https://github.com/anthropics/skills",
        "https://github.com/anthropics/skills/",
        "https://github.com/anthropics/skills.git",
        "http://github.com/some-user/my.repo_1",
        "  https://github.com/anthropics/skills  ",
    ])
    def test_valid(self, url):
        assert validate_repository_url(url) == url.strip()

    @pytest.mark.parametrize("url", [
        "https://example.com/x",
        "https://github.com/anthropics",
        "https://github.com/anthropics/skills/tree/main",
        "git@github.com:anthropics/skills.git",
        "",
    ])
    def test_invalid(self, url):
        with pytest.raises(InvalidRepositoryURL):
            validate_repository_url(url)

    def test_parse_github_url(self):
        assert parse_github_url("https://github.com/anthropics/skills.git/") == ("anthropics", "skills")

    def test_extract_repository_name(self):
        assert extract_repository_name("https://github.com/anthropics/skills") == "Skills"
        assert extract_repository_name("https://github.com/acme/agent-tools.git") == "Agent-Tools"
        assert extract_repository_name("") == "Unknown"

    def test_normalize(self):
        assert normalize_repository_url("https://github.com/Anthropics/Skills.git") == "anthropics/skills"
        assert normalize_repository_url(" not a url ") == "not a url"


class TestRepositoryStore:
    def test_defaults_without_file(self, store, fs):
        [reference] = store.references
        assert reference.id == DEFAULT_REPOSITORY_ID
        assert reference.url == DEFAULT_REPOSITORY_URL
        assert not fs.exists(STORE_PATH)

    def test_corrupt_file_yields_defaults(self, fs):
        fs.add_file(STORE_PATH, "{not json")
        [reference] = RepositoryStore(STORE_PATH, fs=fs).references
        assert reference.id == DEFAULT_REPOSITORY_ID

    def test_add_persists(self, store, fs):
        reference = store.add("https://github.com/acme/tools", name="Acme")

        assert reference.name == "Acme"
        saved = json.loads(fs.read_text(STORE_PATH))
        assert [r["url"] for r in saved] == [DEFAULT_REPOSITORY_URL, "https://github.com/acme/tools"]

        reloaded = RepositoryStore(STORE_PATH, fs=fs).references
        assert reloaded[1].id == reference.id
        assert reloaded[1].added_at == reference.added_at

    def test_add_derives_name(self, store):
        assert store.add("https://github.com/acme/tools").name == "Tools"

    def test_invalid_url_rejected_before_any_write(self, store, fs):
        with pytest.raises(InvalidRepositoryURL):
            store.add("https://example.com/x")
        assert fs.files == {}

    def test_duplicate_rejected(self, store):
        with pytest.raises(DuplicateRepositoryError):
            store.add("https://github.com/Anthropics/skills.git")

    def test_get_by_id_or_url(self, store):
        reference = store.add("https://github.com/acme/tools")
        assert store.get(reference.id) == reference
        assert store.get("https://github.com/acme/tools/") == reference

    def test_remove(self, store, fs):
        reference = store.add("https://github.com/acme/tools")

        removed = store.remove(reference.id)

        assert removed == reference
        assert [r.id for r in RepositoryStore(STORE_PATH, fs=fs).references] == [DEFAULT_REPOSITORY_ID]

    def test_remove_default_leaves_empty_list(self, store, fs):
        store.remove(DEFAULT_REPOSITORY_ID)
        assert RepositoryStore(STORE_PATH, fs=fs).references == []

    def test_remove_unknown(self, store):
        with pytest.raises(RepositoryNotFound):
            store.remove("nope")
