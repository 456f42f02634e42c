"""Abstract object storage definition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime


class StorageError(Exception):
    """Raised when the storage service rejects or fails a request."""


@dataclass(frozen=True, slots=True)
class StoredObject:
    """Entry returned by :meth:`ObjectStorage.list_objects`."""

    name: str
    created_at: datetime | None


class ObjectStorage(ABC):
    """Durable bucket shared by publishing jobs and the retention sweeper."""

    @abstractmethod
    async def upload(
        self,
        name: str,
        payload: bytes,
        *,
        content_type: str,
        upsert: bool = True,
    ) -> None:
        """Store ``payload`` under ``name``; overwrite when ``upsert`` is set."""

    @abstractmethod
    def public_url(self, name: str) -> str:
        """Return the public retrieval URL for ``name``."""

    @abstractmethod
    async def list_objects(self) -> list[StoredObject]:
        """Return every object currently stored in the bucket."""

    @abstractmethod
    async def remove(self, names: Sequence[str]) -> None:
        """Delete ``names`` in a single bulk call."""
