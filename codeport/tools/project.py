"""
Sandboxed project directory access.

A ``Project`` wraps one directory root. It lists, reads and writes files by
relative path, rejects paths that could escape the root, and remembers
whether anything was written since the flag was last cleared.

Failures are returned as result objects with an ``error`` field so the
model can see them and react.
"""

import logging
import threading
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Optional, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Entries at the project root that are never shown to the model.
IGNORED_DIRECTORIES = frozenset({".git", "target"})
IGNORED_FILES = frozenset({".gitignore", ".env", "Cargo.lock", "LICENSE", "LICENSE.txt"})

INVALID_PATH = "Invalid path."
CANNOT_READ = "Cannot read file."
CANNOT_WRITE = "Cannot write file."


class ReadFileArgs(BaseModel):
    path: str = Field(description="a relative path to the file in the project directory")


class WriteFileArgs(BaseModel):
    path: str = Field(description="a relative path to the file in the project directory")
    contents: str = Field(description="new contents of a file")


class ProjectDirectoryContents(BaseModel):
    files: list[str]


class ReadFileResult(BaseModel):
    error: Optional[str] = None
    contents: Optional[str] = None


class WriteFileResult(BaseModel):
    error: Optional[str] = None


def is_valid_relative_path(path: str) -> bool:
    """Check that ``path`` stays inside the project root.

    Rejects absolute paths, paths starting with a dot (hidden entries and
    ``./`` prefixes), any ``..`` segment and embedded NUL characters.
    """
    if not path or "\0" in path or path.startswith((".", "/", "\\")):
        return False
    if PureWindowsPath(path).is_absolute() or PureWindowsPath(path).drive:
        return False
    segments = path.replace("\\", "/").split("/")
    return ".." not in segments


class Project:
    """A project directory the model can inspect (and possibly modify)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._dirty = threading.Event()

    def __repr__(self) -> str:
        return f"Project({str(self.path)!r})"

    def list_contents(self) -> ProjectDirectoryContents:
        """List all files below the root as sorted POSIX relative paths."""
        files = sorted(
            str(PurePosixPath(*relpath.parts))
            for relpath in self._walk(self.path, Path())
        )
        return ProjectDirectoryContents(files=files)

    def _walk(self, directory: Path, relpath: Path) -> list[Path]:
        found: list[Path] = []
        try:
            entries = list(directory.iterdir())
        except OSError as e:
            logger.debug(f"Cannot list {directory}: {e}")
            return found

        for entry in entries:
            entry_relpath = relpath / entry.name
            if self._is_ignored(entry, entry_relpath):
                continue
            if entry.is_dir():
                found.extend(self._walk(entry, entry_relpath))
            elif entry.is_file():
                found.append(entry_relpath)
        return found

    @staticmethod
    def _is_ignored(entry: Path, relpath: Path) -> bool:
        if entry.is_symlink():
            return True
        top_level = len(relpath.parts) == 1
        if entry.is_dir():
            return top_level and relpath.name in IGNORED_DIRECTORIES
        if entry.is_file():
            return top_level and relpath.name in IGNORED_FILES
        return True

    def read_file(self, path: str) -> ReadFileResult:
        """Read a text file relative to the root."""
        if not is_valid_relative_path(path):
            logger.debug(f"Rejected read of invalid path {path!r} in {self.path}")
            return ReadFileResult(error=INVALID_PATH)

        try:
            contents = (self.path / path).read_text(encoding="utf-8")
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot read {path} in {self.path}: {e}")
            return ReadFileResult(error=CANNOT_READ)
        return ReadFileResult(contents=contents)

    def write_file(self, path: str, contents: str) -> WriteFileResult:
        """Write a text file relative to the root, creating parent directories.

        Marks the project dirty on success.
        """
        if not is_valid_relative_path(path):
            logger.debug(f"Rejected write of invalid path {path!r} in {self.path}")
            return WriteFileResult(error=INVALID_PATH)

        target = self.path / path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(contents, encoding="utf-8")
        except (OSError, ValueError) as e:
            logger.warning(f"Cannot write {path} in {self.path}: {e}")
            return WriteFileResult(error=CANNOT_WRITE)

        self.mark_dirty()
        logger.info(f"Wrote {target} ({len(contents)} chars)")
        return WriteFileResult()

    def is_dirty(self) -> bool:
        """True if a write succeeded since the flag was last cleared."""
        return self._dirty.is_set()

    def mark_dirty(self) -> None:
        self._dirty.set()

    def clear_dirty(self) -> None:
        self._dirty.clear()
