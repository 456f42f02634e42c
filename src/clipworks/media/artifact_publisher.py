"""Publishing of finished artifacts to object storage."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from ..jobs.job_errors import UploadError
from ..storage.storage_base import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

UPLOAD_FAILED = "Processing succeeded, but cloud upload failed."


@dataclass(slots=True)
class ArtifactPublisher:
    """Upload a local artifact under a stable name and resolve its URL."""

    storage: ObjectStorage
    content_type: str = "video/mp4"
    log: logging.Logger = field(default_factory=lambda: logger)

    async def publish(self, local_path: Path, artifact_name: str) -> str:
        try:
            payload = await asyncio.to_thread(local_path.read_bytes)
        except OSError as exc:
            raise UploadError(UPLOAD_FAILED, str(exc)) from exc

        try:
            await self.storage.upload(
                artifact_name,
                payload,
                content_type=self.content_type,
                upsert=True,
            )
        except StorageError as exc:
            self.log.error(
                "artifact.upload.failed",
                extra={"artifact": artifact_name, "error": str(exc)},
            )
            raise UploadError(UPLOAD_FAILED, str(exc)) from exc

        url = self.storage.public_url(artifact_name)
        if not _is_retrievable(url):
            await self._discard(artifact_name)
            raise UploadError(
                UPLOAD_FAILED,
                f"storage returned no public URL for '{artifact_name}'",
            )

        self.log.info(
            "artifact.published",
            extra={"artifact": artifact_name, "size_bytes": len(payload), "url": url},
        )
        return url

    async def _discard(self, artifact_name: str) -> None:
        try:
            await self.storage.remove([artifact_name])
        except StorageError as exc:
            self.log.warning(
                "artifact.discard.failed",
                extra={"artifact": artifact_name, "error": str(exc)},
            )


def _is_retrievable(url: str | None) -> bool:
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)
