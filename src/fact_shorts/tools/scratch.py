"""Local scratch storage — the only place the pipeline touches the filesystem."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import BinaryIO

import structlog

logger = structlog.get_logger()


class ScratchStorage:
    """Create, list, write, copy and remove files under a root directory."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def path(self, *parts: str) -> Path:
        return self.root.joinpath(*parts)

    def create_dir(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def list_files(self, directory: Path) -> list[Path]:
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.iterdir())

    def write_bytes(self, path: Path, data: bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def open_write(self, path: Path) -> BinaryIO:
        """Open *path* for incremental binary writes, creating parents."""
        path.parent.mkdir(parents=True, exist_ok=True)
        return path.open("wb")

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def copy(self, source: Path, destination: Path) -> Path:
        shutil.copyfile(source, destination)
        return destination

    def remove(self, path: Path) -> None:
        """Remove a single file. Missing files are ignored."""
        path.unlink(missing_ok=True)

    def purge(self, directory: Path) -> int:
        """Delete every entry inside *directory*; returns how many were removed."""
        removed = 0
        for entry in self.list_files(directory):
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            removed += 1
        return removed

    def remove_dir(self, directory: Path) -> None:
        if directory.is_dir():
            self.purge(directory)
            directory.rmdir()
