"""Remote repository references: URL validation and the persisted list."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from skillsync.errors import DuplicateRepositoryError, InvalidRepositoryURL, RepositoryNotFound
from skillsync.fs import FileSystem, LocalFileSystem, PathLike
from skillsync.skills.models import RemoteRepositoryReference
from skillsync.utils import get_logger

logger = get_logger(__name__)

LOCAL_CATALOG_ID = "00000000-0000-0000-0000-000000000000"
DEFAULT_REPOSITORY_ID = "00000000-0000-0000-0000-000000000001"
DEFAULT_REPOSITORY_URL = "https://github.com/anthropics/skills"
DEFAULT_REPOSITORY_NAME = "Anthropic Skills"

GITHUB_URL_RE = re.compile(
    r"^https?://github\.com/(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?/?$"
)
GITHUB_PREFIXES = ("https://github.com/", "http://github.com/")

_references_adapter = TypeAdapter(list[RemoteRepositoryReference])


def default_reference() -> RemoteRepositoryReference:
    return RemoteRepositoryReference(
        id=DEFAULT_REPOSITORY_ID,
        url=DEFAULT_REPOSITORY_URL,
        name=DEFAULT_REPOSITORY_NAME,
        added_at=datetime.fromtimestamp(0, tz=timezone.utc),
    )


def validate_repository_url(url: str) -> str:
    """Check that ``url`` names a GitHub repository.

    Returns:
        The URL, stripped of surrounding whitespace

    Raises:
        InvalidRepositoryURL: Not of the form ``https://github.com/<owner>/<repo>``
    """
    candidate = url.strip()
    if not GITHUB_URL_RE.match(candidate):
        raise InvalidRepositoryURL(url)
    return candidate


def _repository_path(url: str) -> str:
    path = url.strip()
    for prefix in GITHUB_PREFIXES:
        if path.startswith(prefix):
            path = path[len(prefix):]
            break
    path = path.rstrip("/")
    if path.endswith(".git"):
        path = path[:-4]
    return path


def parse_github_url(url: str) -> tuple[str, str]:
    """Split a GitHub repository URL into ``(owner, repo)``.

    Raises:
        InvalidRepositoryURL: The URL has no owner/repo part
    """
    parts = [p for p in _repository_path(url).split("/") if p]
    if len(parts) < 2:
        raise InvalidRepositoryURL(url)
    return parts[0], parts[1]


def extract_repository_name(url: str) -> str:
    """Human name for a repository URL.

    >>> extract_repository_name("https://github.com/anthropics/skills")
    'Skills'
    """
    path = _repository_path(url)
    parts = [p for p in path.split("/") if p]
    if len(parts) >= 2:
        return parts[1].title()
    return path or "Unknown"


def normalize_repository_url(url: str) -> str:
    """Comparison key for duplicate detection."""
    try:
        owner, repo = parse_github_url(url)
    except InvalidRepositoryURL:
        return url.strip().lower()
    return f"{owner}/{repo}".lower()


class RepositoryStore:
    """User-managed list of remote repositories, persisted as JSON.

    A missing or unreadable file yields the default reference list; the
    file is only written when the list changes.
    """

    def __init__(self, path: PathLike, fs: FileSystem | None = None) -> None:
        self.path = Path(path)
        self.fs = fs or LocalFileSystem()
        self._references: list[RemoteRepositoryReference] | None = None

    def load(self) -> list[RemoteRepositoryReference]:
        try:
            raw = self.fs.read_bytes(self.path)
        except OSError:
            logger.debug("No repository list at %s, using defaults", self.path)
            self._references = [default_reference()]
            return list(self._references)

        try:
            self._references = _references_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Repository list is corrupt, using defaults",
                extra={"path": str(self.path), "errors": e.error_count()},
            )
            self._references = [default_reference()]
        return list(self._references)

    def save(self) -> None:
        self.fs.make_dirs(self.path.parent)
        self.fs.write_bytes(self.path, _references_adapter.dump_json(self.references, indent=2))

    @property
    def references(self) -> list[RemoteRepositoryReference]:
        if self._references is None:
            self.load()
        return list(self._references or [])

    def get(self, ref: str) -> RemoteRepositoryReference:
        """Look a reference up by id or URL.

        Raises:
            RepositoryNotFound: No reference matches
        """
        for reference in self.references:
            if reference.id == ref or reference.url == ref:
                return reference
        key = normalize_repository_url(ref)
        for reference in self.references:
            if normalize_repository_url(reference.url) == key:
                return reference
        raise RepositoryNotFound(ref)

    def add(self, url: str, name: str | None = None) -> RemoteRepositoryReference:
        """Validate and append a repository.

        Raises:
            InvalidRepositoryURL: Not a GitHub repository URL
            DuplicateRepositoryError: The repository is already in the list
        """
        url = validate_repository_url(url)
        key = normalize_repository_url(url)
        current = self.references
        if any(normalize_repository_url(r.url) == key for r in current):
            raise DuplicateRepositoryError(url)

        reference = RemoteRepositoryReference(url=url, name=name or extract_repository_name(url))
        self._references = [*current, reference]
        self.save()
        logger.info("Added repository", extra={"url": url, "id": reference.id})
        return reference

    def remove(self, ref: str) -> RemoteRepositoryReference:
        """Remove a repository by id or URL and return it.

        Raises:
            RepositoryNotFound: No reference matches
        """
        reference = self.get(ref)
        self._references = [r for r in self.references if r.id != reference.id]
        self.save()
        logger.info("Removed repository", extra={"url": reference.url, "id": reference.id})
        return reference
