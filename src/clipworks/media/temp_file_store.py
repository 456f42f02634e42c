"""Scratch storage for uploaded inputs and transform outputs."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from starlette.datastructures import UploadFile

from ..jobs.job_errors import PayloadTooLargeError

CHUNK_SIZE = 1 * 1024 * 1024  # 1 MiB
_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,8}$")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class TempFileStore:
    """Hands out uniquely named scratch paths and deletes them afterwards."""

    root: Path
    max_upload_bytes: int
    chunk_size: int = CHUNK_SIZE
    clock: Callable[[], datetime] = _utc_now
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def ensure_structure(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def allocate(self, prefix: str, suffix: str = "") -> Path:
        """Reserve ``{prefix}_{epoch_ms}{suffix}`` and return its path.

        The file is created exclusively so two concurrent jobs can never share
        a name; on collision the millisecond stamp is bumped.
        """
        directory = self.ensure_structure()
        stamp = int(self.clock().timestamp() * 1000)
        while True:
            candidate = directory / f"{prefix}_{stamp}{suffix}"
            try:
                candidate.touch(exist_ok=False)
            except FileExistsError:
                stamp += 1
                continue
            return candidate

    async def persist_upload(
        self,
        upload: UploadFile,
        field_name: str,
        *,
        on_allocate: Callable[[Path], None],
    ) -> Path:
        """Stream ``upload`` into a fresh scratch file.

        ``on_allocate`` receives the path before any byte is written so the
        owner can clean it up even when copying fails half-way.
        """
        target = self.allocate(field_name, self._derive_extension(upload.filename))
        on_allocate(target)

        written = 0
        with target.open("wb") as sink:
            while True:
                chunk = await upload.read(self.chunk_size)
                if not chunk:
                    break
                written += len(chunk)
                if written > self.max_upload_bytes:
                    self.log.warning(
                        "media.temp.upload_too_large",
                        extra={
                            "field": field_name,
                            "size_bytes": written,
                            "limit_bytes": self.max_upload_bytes,
                        },
                    )
                    raise PayloadTooLargeError(
                        "Uploaded file is too large.",
                        f"{field_name} exceeds {self.max_upload_bytes} bytes",
                    )
                sink.write(chunk)

        self.log.info(
            "media.temp.persisted",
            extra={"field": field_name, "path": str(target), "size_bytes": written},
        )
        return target

    def cleanup(self, paths: Iterable[Path]) -> None:
        """Delete every existing path; missing ones are skipped."""
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                self.log.warning(
                    "media.temp.cleanup_failed",
                    extra={"path": str(path), "error": str(exc)},
                )

    @staticmethod
    def _derive_extension(filename: str | None) -> str:
        if not filename:
            return ""
        suffix = Path(filename).suffix
        if _SAFE_EXTENSION.match(suffix):
            return suffix.lower()
        return ""
