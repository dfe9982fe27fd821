"""Skills read straight from the GitHub contents API, without cloning."""

from __future__ import annotations

import asyncio
from pathlib import PurePosixPath

from skillsync.errors import InvalidRepositoryURL, RemoteAPIError, SkillParseError
from skillsync.remote.github import GitHubClient
from skillsync.skills.merge import sort_by_name
from skillsync.skills.models import RemoteOrigin, SkillPackage
from skillsync.skills.parser import parse_skill
from skillsync.skills.references import parse_github_url
from skillsync.skills.scanner import SKILL_FILENAME
from skillsync.skills.strategies import Strategy, first_available
from skillsync.sources.base import SkillSource
from skillsync.utils import get_logger, join_relative

logger = get_logger(__name__)

SKILLS_DIR = "skills"


class GitHubApiSource(SkillSource):
    """Lists top-level skill folders of a repository over HTTP.

    Only the repository root, or its ``skills/`` directory when present, is
    searched. Use ``ClonedRepoSource`` for nested layouts.
    """

    def __init__(self, repo_url: str, client: GitHubClient | None = None) -> None:
        self.repo_url = repo_url
        self.client = client or GitHubClient()
        self.name = self.origin.display_name

    @property
    def origin(self) -> RemoteOrigin:
        return RemoteOrigin(repo_url=self.repo_url)

    async def _read_package(self, owner: str, repo: str, base: str, folder: str) -> SkillPackage | None:
        path = join_relative(base, folder, SKILL_FILENAME)
        try:
            content = await self.client.read_file(owner, repo, path)
        except RemoteAPIError as e:
            logger.debug("No readable SKILL.md", extra={"path": path, "error": str(e)})
            return None
        try:
            return parse_skill(content, folder, self.origin, base or None)
        except SkillParseError as e:
            logger.debug("Skipping invalid skill package", extra={"path": path, "error": str(e)})
            return None

    async def fetch_all(self) -> list[SkillPackage]:
        try:
            owner, repo = parse_github_url(self.repo_url)
            entries = await self.client.list_directory(owner, repo, "")
            base = ""
            if any(e.is_dir and e.name == SKILLS_DIR for e in entries):
                base = SKILLS_DIR
                entries = await self.client.list_directory(owner, repo, SKILLS_DIR)
        except (RemoteAPIError, InvalidRepositoryURL) as e:
            logger.warning("Repository listing failed", extra={"url": self.repo_url, "error": str(e)})
            return []

        folders = [e.name for e in entries if e.is_dir]
        results = await asyncio.gather(*(self._read_package(owner, repo, base, f) for f in folders))
        return sort_by_name(s for s in results if s is not None)

    async def fetch_one(self, skill_id: str) -> SkillPackage | None:
        try:
            owner, repo = parse_github_url(self.repo_url)
        except InvalidRepositoryURL:
            return None

        relative = PurePosixPath(skill_id)
        parent = "" if str(relative.parent) == "." else str(relative.parent)
        return await first_available([
            Strategy("root", lambda: self._read_package(owner, repo, parent, relative.name)),
            Strategy(
                "skills directory",
                lambda: self._read_package(owner, repo, join_relative(SKILLS_DIR, parent), relative.name),
            ),
        ])
