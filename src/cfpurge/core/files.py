from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from types import TracebackType
from typing import IO, Iterable

from cfpurge.core.errors import RelocationError, StagingIOError

logger = logging.getLogger(__name__)


def staging_directory_for(target: Path) -> Path:
    """Pick the directory a staging file for ``target`` should live in."""
    target_dir = target.parent
    if target_dir.is_dir() and os.access(target_dir, os.W_OK):
        return target_dir
    return Path(tempfile.gettempdir())


class StagedFile:
    """A temporary file that becomes ``target`` only when committed.

    Used as a context manager, an uncommitted staging file is removed however the
    block exits. A staging file whose relocation failed is left in place so its
    contents can be recovered.
    """

    def __init__(self, target: Path) -> None:
        self.target = target
        self.path: Path | None = None
        self._handle: IO[str] | None = None
        self._committed = False
        self._kept = False

    def __enter__(self) -> StagedFile:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self._committed and not self._kept:
            self.discard()

    def open(self) -> Path:
        staging_dir = staging_directory_for(self.target)
        try:
            fd, raw_path = tempfile.mkstemp(prefix=f"{self.target.name}.", dir=staging_dir)
            self._handle = os.fdopen(fd, "w", encoding="utf-8")
        except OSError as exc:
            raise StagingIOError(
                f"Failed to create temporary file for '{self.target}' in {staging_dir}: {exc}"
            ) from exc
        self.path = Path(raw_path)
        logger.debug("Staging %s in %s", self.target, self.path)
        return self.path

    def write_lines(self, lines: Iterable[str]) -> None:
        if self._handle is None:
            raise StagingIOError(f"Staging file for '{self.target}' is not open.")
        try:
            for line in lines:
                self._handle.write(line + "\n")
            self._handle.flush()
        except OSError as exc:
            raise StagingIOError(f"Failed to write staging file '{self.path}': {exc}") from exc

    def commit(self) -> Path:
        if self.path is None:
            raise StagingIOError(f"Staging file for '{self.target}' was never created.")
        self._close()
        try:
            if self.path.parent.resolve() == self.target.parent.resolve():
                os.replace(self.path, self.target)
            else:
                shutil.move(str(self.path), str(self.target))
        except OSError as exc:
            self._kept = True
            raise RelocationError(
                f"Failed to move temporary file '{self.path}' to '{self.target}': {exc}. "
                f"The temporary file might still exist at '{self.path}'.",
                staging_path=str(self.path),
            ) from exc
        self._committed = True
        return self.target

    def discard(self) -> None:
        self._close()
        if self.path is not None and self.path.exists():
            self.path.unlink()
            logger.warning("Cleaned up temporary file: %s", self.path)

    def _close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
