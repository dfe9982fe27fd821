"""A source that folds several sources into one identity-merged listing."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from skillsync.skills.merge import merge_installations, sort_by_name
from skillsync.skills.models import SkillPackage
from skillsync.sources.base import SkillSource
from skillsync.utils import get_logger

logger = get_logger(__name__)


class MergedSource(SkillSource):
    """Lists all child sources concurrently and merges by ``display_id``.

    Used for the local catalog: one skill installed for several providers
    shows up once with every provider in ``installed_providers``. A child
    source that raises contributes nothing.
    """

    def __init__(self, sources: Sequence[SkillSource], name: str = "Local") -> None:
        self.sources = list(sources)
        self.name = name

    async def fetch_all(self) -> list[SkillPackage]:
        results = await asyncio.gather(
            *(source.fetch_all() for source in self.sources),
            return_exceptions=True,
        )
        combined: list[SkillPackage] = []
        for source, result in zip(self.sources, results):
            if isinstance(result, BaseException):
                logger.warning("Source failed", extra={"source": source.name, "error": str(result)})
                continue
            combined.extend(result)
        return sort_by_name(merge_installations(combined))

    async def fetch_one(self, skill_id: str) -> SkillPackage | None:
        found: SkillPackage | None = None
        for source in self.sources:
            skill = await source.fetch_one(skill_id)
            if skill is None:
                continue
            if found is None:
                found = skill
            else:
                found = found.with_installed_providers(found.installed_providers | skill.installed_providers)
        return found
