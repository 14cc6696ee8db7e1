"""File-system capability used by the sitemap generator."""

from __future__ import annotations

import os
from pathlib import Path
import tempfile
from typing import Protocol


class FileSystem(Protocol):
    """Minimal file operations the generator and resolver depend on."""

    def exists(self, path: Path) -> bool: ...

    def mkdir_all(self, path: Path) -> None: ...

    def read_file(self, path: Path) -> bytes: ...

    def write_file(self, path: Path, content: bytes) -> None: ...

    def stat_mtime(self, path: Path) -> float: ...


class LocalFileSystem:
    """pathlib-backed file system with per-file atomic replacement."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def mkdir_all(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def read_file(self, path: Path) -> bytes:
        return path.read_bytes()

    def write_file(self, path: Path, content: bytes) -> None:
        file_descriptor, temp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(file_descriptor, "wb") as handle:
                handle.write(content)
            # mkstemp creates 0600 files; generated artifacts are public
            os.chmod(temp_name, 0o644)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def stat_mtime(self, path: Path) -> float:
        """Return the modification time in seconds since the epoch."""

        return path.stat().st_mtime


__all__ = ["FileSystem", "LocalFileSystem"]
