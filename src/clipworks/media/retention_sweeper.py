"""Deletion of stored artifacts that outlived the retention window."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from ..storage.storage_base import ObjectStorage, StorageError, StoredObject

logger = logging.getLogger(__name__)


def select_expired(
    objects: Iterable[StoredObject], *, now: datetime, max_age: timedelta
) -> list[str]:
    """Return names of objects strictly older than ``max_age``."""
    return [
        obj.name
        for obj in objects
        if obj.name and obj.created_at is not None and now - obj.created_at > max_age
    ]


@dataclass(slots=True)
class RetentionSweeper:
    """List the bucket and bulk-delete expired artifacts.

    Storage failures are logged and swallowed; the next scheduled run
    retries implicitly.
    """

    storage: ObjectStorage
    max_age: timedelta = timedelta(hours=24)
    log: logging.Logger = field(default_factory=lambda: logger)

    async def find_expired(self, now: datetime | None = None) -> list[str]:
        current = now or datetime.now(timezone.utc)
        objects = await self.storage.list_objects()
        return select_expired(objects, now=current, max_age=self.max_age)

    async def sweep_once(self, now: datetime | None = None) -> list[str]:
        """Run one sweep and return the names that were deleted."""
        try:
            expired = await self.find_expired(now)
        except StorageError as exc:
            self.log.error("retention.sweep.list_failed", extra={"error": str(exc)})
            return []

        if not expired:
            return []

        try:
            await self.storage.remove(expired)
        except StorageError as exc:
            self.log.error(
                "retention.sweep.remove_failed",
                extra={"count": len(expired), "error": str(exc)},
            )
            return []

        self.log.info("retention.sweep.removed", extra={"count": len(expired)})
        return expired
