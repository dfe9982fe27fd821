"""Skill source adapters."""

from skillsync.sources.base import SkillSource
from skillsync.sources.cloned import ClonedRepoSource
from skillsync.sources.directory import LocalDirectorySource
from skillsync.sources.github import GitHubApiSource
from skillsync.sources.local import LocalProviderSource
from skillsync.sources.merged import MergedSource

__all__ = [
    "SkillSource",
    "LocalProviderSource",
    "ClonedRepoSource",
    "LocalDirectorySource",
    "GitHubApiSource",
    "MergedSource",
]
