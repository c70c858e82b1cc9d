"""
app/repositories/upload_staging.py

Transient on-disk staging for uploaded CSV files.

An upload is copied into the staging directory before ingestion reads it and
is deleted once the run is over, whatever the outcome.
"""

from __future__ import annotations

import logging
import shutil
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)


class UploadStagingError(RuntimeError):
    """
    Raised when an upload cannot be written to the staging directory.
    """


@dataclass(frozen=True)
class StagedUpload:
    file_name: str
    path: Path
    size_bytes: int


def _sanitize_file_name(file_name: str | None) -> str:
    safe_name = Path(file_name or "").name.strip()
    return safe_name or "upload.csv"


class UploadStagingArea:
    """
    Local filesystem staging directory for uploads.
    """

    def __init__(self, root_dir: str | Path = "uploads") -> None:
        self._root_dir = Path(root_dir)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def stage(self, *, source: BinaryIO, file_name: str | None = None) -> StagedUpload:
        """
        Copy ``source`` into a uniquely named file under the staging directory.
        """

        safe_file_name = _sanitize_file_name(file_name)
        target = self._root_dir / f"{uuid.uuid4().hex}_{safe_file_name}"
        tmp_path = target.with_suffix(f"{target.suffix}.tmp")
        try:
            self._root_dir.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as handle:
                shutil.copyfileobj(source, handle)
            tmp_path.replace(target)
        except OSError as exc:
            raise UploadStagingError("Failed to write uploaded file to staging.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    logger.warning("Could not remove partial staging file path=%s", tmp_path)

        staged = StagedUpload(
            file_name=safe_file_name,
            path=target,
            size_bytes=target.stat().st_size,
        )
        logger.debug("Staged upload file_name=%s path=%s bytes=%d", safe_file_name, target, staged.size_bytes)
        return staged

    def release(self, staged: StagedUpload) -> None:
        """
        Delete a staged upload. A failed delete is logged, never raised.
        """

        try:
            staged.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove staged upload path=%s: %s", staged.path, exc)

    @contextmanager
    def staged(self, *, source: BinaryIO, file_name: str | None = None) -> Iterator[StagedUpload]:
        """
        Stage ``source`` for the duration of the ``with`` block.
        """

        staged = self.stage(source=source, file_name=file_name)
        try:
            yield staged
        finally:
            self.release(staged)
