"""A named, deduplicated collection of skills from one source."""

from __future__ import annotations

from collections.abc import Iterable

from skillsync.skills.merge import reconcile_installations, sort_by_name
from skillsync.skills.models import SkillPackage
from skillsync.sources.base import SkillSource
from skillsync.utils import get_logger

logger = get_logger(__name__)


class SkillCatalog:
    """Owns the skills listed from one source, keyed by ``display_id``.

    Catalog updates go through the methods below; ``skills`` always returns
    a sorted copy.

    Args:
        id: Catalog id (the repository reference id for remote catalogs)
        name: Human name
        source: Source the catalog is loaded from
        url: Repository URL; None for local catalogs
    """

    def __init__(
        self,
        id: str,
        name: str,
        source: SkillSource,
        url: str | None = None,
    ) -> None:
        self.id = id
        self.name = name
        self.source = source
        self.url = url
        self.error_message: str | None = None
        self._skills: dict[str, SkillPackage] = {}

    def __repr__(self) -> str:
        return f"SkillCatalog(name={self.name!r}, skills={len(self._skills)})"

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, display_id: object) -> bool:
        return display_id in self._skills

    @property
    def is_local(self) -> bool:
        return self.url is None

    @property
    def skills(self) -> list[SkillPackage]:
        return sort_by_name(self._skills.values())

    async def load(self) -> list[SkillPackage]:
        """Reload from the source. Failures are recorded, not raised."""
        self.error_message = None
        try:
            skills = await self.source.fetch_all()
        except Exception as e:
            logger.warning("Catalog load failed", extra={"catalog": self.name, "error": str(e)})
            self.error_message = str(e)
            skills = []
        self.replace_all(skills)
        return self.skills

    def replace_all(self, skills: Iterable[SkillPackage]) -> None:
        self._skills = {}
        for skill in skills:
            self._skills.setdefault(skill.display_id, skill)

    def get(self, display_id: str) -> SkillPackage | None:
        return self._skills.get(display_id)

    def find(self, query: str) -> SkillPackage | None:
        """Resolve a user-supplied reference.

        Tries the display id, then the folder name, then a case-insensitive
        name match.
        """
        if query in self._skills:
            return self._skills[query]
        for skill in self.skills:
            if skill.local_id == query:
                return skill
        folded = query.casefold()
        for skill in self.skills:
            if skill.name.casefold() == folded:
                return skill
        return None

    def search(self, text: str) -> list[SkillPackage]:
        """Skills whose name or description contains ``text`` (case-insensitive)."""
        if not text:
            return self.skills
        folded = text.casefold()
        return [
            s for s in self.skills
            if folded in s.name.casefold() or folded in s.description.casefold()
        ]

    def add(self, skill: SkillPackage) -> bool:
        """Add a skill unless its identity is already present."""
        if skill.display_id in self._skills:
            return False
        self._skills[skill.display_id] = skill
        return True

    def remove(self, display_id: str) -> SkillPackage | None:
        return self._skills.pop(display_id, None)

    def replace(self, skill: SkillPackage) -> bool:
        """Swap in an updated record for an existing identity."""
        if skill.display_id not in self._skills:
            return False
        self._skills[skill.display_id] = skill
        return True

    def set_installed(self, display_id: str, providers: frozenset[str] | set[str]) -> None:
        skill = self._skills.get(display_id)
        if skill is not None:
            self._skills[display_id] = skill.with_installed_providers(providers)

    def sync_installations(self, local_skills: Iterable[SkillPackage]) -> None:
        """Overwrite installation state from the local skill list."""
        reconciled = reconcile_installations(self._skills.values(), local_skills)
        self._skills = {s.display_id: s for s in reconciled}
