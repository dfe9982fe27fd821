"""File-system primitives shared by the scanner, the source adapters and the installer.

Everything that touches disk goes through a ``FileSystem`` so the engine can
run against ``MemoryFileSystem`` in tests. All failures are raised as
``OSError`` subclasses, mirroring what ``pathlib`` would raise.
"""

from __future__ import annotations

import errno
import os
import shutil
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Union

PathLike = Union[str, os.PathLike]


class FileSystem(ABC):
    """Minimal file-system surface used across skillsync."""

    @abstractmethod
    def exists(self, path: PathLike) -> bool:
        """True if a file or directory exists at ``path``; False if it cannot be inspected."""

    @abstractmethod
    def is_dir(self, path: PathLike) -> bool:
        """True if ``path`` is an existing directory; False if it cannot be inspected."""

    @abstractmethod
    def list_dir(self, path: PathLike) -> list[str]:
        """Entry names of a directory, in a stable order.

        Raises:
            OSError: ``path`` is missing, not a directory, or unreadable.
        """

    @abstractmethod
    def read_bytes(self, path: PathLike) -> bytes:
        """Raw content of a file."""

    @abstractmethod
    def make_dirs(self, path: PathLike) -> None:
        """Create ``path`` and any missing parents; existing directories are fine."""

    @abstractmethod
    def write_bytes(self, path: PathLike, data: bytes) -> None:
        """Create or overwrite a file. The parent directory must exist."""

    @abstractmethod
    def remove_tree(self, path: PathLike) -> None:
        """Remove a file or a directory with everything below it."""

    def read_text(self, path: PathLike, encoding: str = "utf-8") -> str:
        return self.read_bytes(path).decode(encoding)

    def write_text(self, path: PathLike, text: str, encoding: str = "utf-8") -> None:
        self.write_bytes(path, text.encode(encoding))

    def copy_file(self, source: PathLike, target: PathLike) -> None:
        self.write_bytes(target, self.read_bytes(source))


class LocalFileSystem(FileSystem):
    """The real file system."""

    def exists(self, path: PathLike) -> bool:
        # Stat errors count as missing
        return os.path.exists(path)

    def is_dir(self, path: PathLike) -> bool:
        return os.path.isdir(path)

    def list_dir(self, path: PathLike) -> list[str]:
        return sorted(os.listdir(path))

    def read_bytes(self, path: PathLike) -> bytes:
        return Path(path).read_bytes()

    def make_dirs(self, path: PathLike) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        Path(path).write_bytes(data)

    def remove_tree(self, path: PathLike) -> None:
        target = Path(path)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()

    def copy_file(self, source: PathLike, target: PathLike) -> None:
        shutil.copyfile(source, target)


class MemoryFileSystem(FileSystem):
    """In-memory file system with POSIX path semantics.

    Relative paths are anchored at ``/``.

    Example::

        fs = MemoryFileSystem({
            "/skills/a/SKILL.md": "---\\nname: a\\ndescription: x\\n---\\n",
        })
        fs.list_dir("/skills")  # ["a"]
    """

    def __init__(self, files: Mapping[str, str | bytes] | None = None) -> None:
        self._files: dict[PurePosixPath, bytes] = {}
        self._dirs: set[PurePosixPath] = {PurePosixPath("/")}
        for path, data in (files or {}).items():
            self.add_file(path, data)

    @staticmethod
    def _key(path: PathLike) -> PurePosixPath:
        return PurePosixPath("/", os.fspath(path))

    def add_file(self, path: PathLike, data: str | bytes) -> None:
        """Write a file, creating parent directories as needed."""
        key = self._key(path)
        self.make_dirs(key.parent)
        self.write_bytes(key, data.encode("utf-8") if isinstance(data, str) else data)

    @property
    def files(self) -> dict[str, bytes]:
        """Snapshot of every file, keyed by absolute path."""
        return {str(k): v for k, v in self._files.items()}

    def exists(self, path: PathLike) -> bool:
        key = self._key(path)
        return key in self._files or key in self._dirs

    def is_dir(self, path: PathLike) -> bool:
        return self._key(path) in self._dirs

    def list_dir(self, path: PathLike) -> list[str]:
        key = self._key(path)
        if key in self._files:
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", str(key))
        if key not in self._dirs:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(key))
        names = {p.name for p in (*self._files, *self._dirs) if p.parent == key and p != key}
        return sorted(names)

    def read_bytes(self, path: PathLike) -> bytes:
        key = self._key(path)
        if key in self._dirs:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", str(key))
        try:
            return self._files[key]
        except KeyError:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(key)) from None

    def make_dirs(self, path: PathLike) -> None:
        key = self._key(path)
        for candidate in (*reversed(key.parents), key):
            if candidate in self._files:
                raise FileExistsError(errno.EEXIST, "File exists", str(candidate))
            self._dirs.add(candidate)

    def write_bytes(self, path: PathLike, data: bytes) -> None:
        key = self._key(path)
        if key in self._dirs:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", str(key))
        if key.parent not in self._dirs:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(key.parent))
        self._files[key] = bytes(data)

    def remove_tree(self, path: PathLike) -> None:
        key = self._key(path)
        if not self.exists(key):
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(key))
        self._files = {p: d for p, d in self._files.items() if p != key and key not in p.parents}
        self._dirs = {p for p in self._dirs if p != key and key not in p.parents}
