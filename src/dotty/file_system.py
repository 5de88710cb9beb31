"""File system access used by the config loader.

Wrapped behind a protocol so the loader can be exercised against an
in-memory double in tests.
"""

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for the file operations dotty performs."""

    def exists(self, path: Path) -> bool:
        """Return True if path exists."""
        ...

    def read_to_string(self, path: Path) -> str:
        """Read the whole file as text.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not valid UTF-8
        """
        ...

    def write(self, path: Path, contents: str) -> None:
        """Write contents to path, creating missing parent directories.

        Raises:
            OSError: If the file cannot be written
        """
        ...


class FileSystemClient:
    """Local disk implementation of FileSystem."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def read_to_string(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write(self, path: Path, contents: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")
        logger.debug(f"Wrote {len(contents)} characters to: {path}")


__all__ = ["FileSystem", "FileSystemClient"]
