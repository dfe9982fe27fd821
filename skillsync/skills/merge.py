"""Identity-based merging of skill lists.

``display_id`` is the identity of a skill across sources. Local provider
directories, clones and plain directories can all hold a copy of the same
logical skill; these helpers fold such copies together and carry the
installation state of the local copies over to remote listings.
"""

from __future__ import annotations

from collections.abc import Iterable

from skillsync.skills.models import SkillPackage
from skillsync.utils import get_logger

logger = get_logger(__name__)


def sort_by_name(skills: Iterable[SkillPackage]) -> list[SkillPackage]:
    return sorted(skills, key=lambda s: (s.name.casefold(), s.display_id))


def _metadata(skill: SkillPackage) -> tuple[str, str, str]:
    return skill.name, skill.description, skill.version


def merge_installations(skills: Iterable[SkillPackage]) -> list[SkillPackage]:
    """Fold skills with equal ``display_id`` into one record.

    The first record seen for an identity keeps its metadata and content;
    ``installed_providers`` is the union over all copies. Output order is
    the order in which identities were first seen.
    """
    merged: dict[str, SkillPackage] = {}
    for skill in skills:
        key = skill.display_id
        existing = merged.get(key)
        if existing is None:
            merged[key] = skill
            continue
        if _metadata(existing) != _metadata(skill):
            logger.debug(
                "Conflicting metadata for skill, keeping first seen",
                extra={"display_id": key, "kept": existing.origin.display_name, "ignored": skill.origin.display_name},
            )
        merged[key] = existing.with_installed_providers(existing.installed_providers | skill.installed_providers)
    return list(merged.values())


def reconcile_installations(
    remote: Iterable[SkillPackage],
    local: Iterable[SkillPackage],
) -> list[SkillPackage]:
    """Copy installation state from local skills onto a remote listing.

    Each remote skill gets the provider set of the local skill with the same
    ``display_id``, or an empty set when there is none.
    """
    installed = {skill.display_id: skill.installed_providers for skill in local}
    return [
        skill.with_installed_providers(installed.get(skill.display_id, frozenset()))
        for skill in remote
    ]


def disambiguate(skills: Iterable[SkillPackage]) -> list[SkillPackage]:
    """Give colliding identities a numeric suffix.

    The first skill with a given ``display_id`` keeps it; later ones become
    ``<id>-2``, ``<id>-3`` and so on, skipping suffixes already in use.
    """
    skills = list(skills)
    taken = {skill.display_id for skill in skills}
    seen: set[str] = set()
    result: list[SkillPackage] = []

    for skill in skills:
        key = skill.display_id
        if key not in seen:
            seen.add(key)
            result.append(skill)
            continue

        n = 2
        while f"{key}-{n}" in taken:
            n += 1
        new_key = f"{key}-{n}"
        taken.add(new_key)
        seen.add(new_key)
        logger.debug("Renamed colliding skill identity", extra={"display_id": key, "renamed_to": new_key})
        result.append(skill.model_copy(update={"unique_key": new_key}))

    return result
