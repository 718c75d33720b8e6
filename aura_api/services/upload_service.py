"""
Flat local file storage for user uploads.
"""

from __future__ import annotations

import logging
from pathlib import Path
import time

from aura_api.core.config import Settings
from aura_api.core.errors import NotFoundError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


def safe_basename(name: str | None) -> str:
    """Strip any directory part a client may send along with the file name."""
    base = Path((name or "").replace("\\", "/")).name.strip()
    if base in {"", ".", ".."}:
        return "file"
    return base


class UploadStore:
    """Stores files as ``<epoch-ms>-<original name>`` in a single directory."""

    def __init__(self, directory: str | Path, *, max_files: int = 5, max_file_size: int = 10 * 1024 * 1024):
        self.directory = Path(directory)
        self.max_files = max_files
        self.max_file_size = max_file_size

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadStore":
        return cls(
            settings.uploads_dir,
            max_files=settings.upload_max_files,
            max_file_size=settings.upload_max_file_size,
        )

    def ensure_directory(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def validate(self, files: list[tuple[str, bytes]]) -> None:
        if not files:
            raise ValidationError("No files uploaded")
        if len(files) > self.max_files:
            raise ValidationError(f"Too many files. Limit is {self.max_files}")
        limit_mb = self.max_file_size // (1024 * 1024)
        for name, content in files:
            if len(content) > self.max_file_size:
                raise ValidationError(f"File {safe_basename(name)} is too large. Limit is {limit_mb}MB")

    def save_all(self, files: list[tuple[str, bytes]]) -> list[str]:
        """Validate every file first, then write them; returns public paths."""
        self.validate(files)
        directory = self.ensure_directory()
        paths = []
        for name, content in files:
            target = self._target_for(directory, safe_basename(name))
            try:
                target.write_bytes(content)
            except OSError as exc:
                logger.error("[upload] Failed to save %s: %s", target, exc)
                raise UpstreamError("Failed to save file", provider="disk") from exc
            paths.append(f"{PUBLIC_PREFIX}/{target.name}")
        logger.info("[upload] Stored %d file(s)", len(paths))
        return paths

    def _target_for(self, directory: Path, base: str) -> Path:
        stamp = int(time.time() * 1000)
        target = directory / f"{stamp}-{base}"
        while target.exists():
            stamp += 1
            target = directory / f"{stamp}-{base}"
        return target

    def delete(self, filename: str) -> None:
        name = (filename or "").strip()
        if not name or name != safe_basename(name):
            raise NotFoundError("File not found", status_code=404)
        path = self.directory / name
        if not path.is_file():
            logger.info("[upload] Delete requested for missing file %s", name)
            raise NotFoundError("File not found", status_code=404)
        try:
            path.unlink()
        except OSError as exc:
            logger.error("[upload] Failed to delete %s: %s", path, exc)
            raise UpstreamError("Failed to delete file", provider="disk") from exc
        logger.info("[upload] Deleted %s", name)
