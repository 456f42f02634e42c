"""Supabase Storage backend talking to the REST API."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from .storage_base import ObjectStorage, StorageError, StoredObject

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 100


@dataclass(slots=True)
class SupabaseStorage(ObjectStorage):
    """Bucket operations over ``/storage/v1``."""

    base_url: str
    api_key: str
    bucket: str
    timeout_seconds: float = 60.0
    page_size: int = LIST_PAGE_SIZE
    log: logging.Logger = field(default_factory=lambda: logger)

    async def upload(
        self,
        name: str,
        payload: bytes,
        *,
        content_type: str,
        upsert: bool = True,
    ) -> None:
        headers = {
            **self._auth_headers(),
            "Content-Type": content_type,
            "x-upsert": "true" if upsert else "false",
        }
        url = self._endpoint(f"object/{self.bucket}/{quote(name)}")
        response = await self._send("POST", url, headers=headers, content=payload)
        self._raise_for_status(response, action="upload", name=name)
        self.log.info(
            "storage.upload.done",
            extra={"bucket": self.bucket, "object": name, "size_bytes": len(payload)},
        )

    def public_url(self, name: str) -> str:
        if not self.base_url:
            return ""
        return self._endpoint(f"object/public/{self.bucket}/{quote(name)}")

    async def list_objects(self) -> list[StoredObject]:
        url = self._endpoint(f"object/list/{self.bucket}")
        objects: list[StoredObject] = []
        offset = 0
        while True:
            body = {
                "prefix": "",
                "limit": self.page_size,
                "offset": offset,
                "sortBy": {"column": "created_at", "order": "asc"},
            }
            response = await self._send("POST", url, headers=self._auth_headers(), json=body)
            self._raise_for_status(response, action="list")
            try:
                page = response.json()
            except ValueError as exc:
                raise StorageError("Storage list returned invalid JSON") from exc
            if not isinstance(page, list):
                raise StorageError(f"Storage list returned unexpected payload: {page!r}")
            objects.extend(_parse_entry(entry) for entry in page if isinstance(entry, dict))
            if len(page) < self.page_size:
                return objects
            offset += len(page)

    async def remove(self, names: Sequence[str]) -> None:
        if not names:
            return
        url = self._endpoint(f"object/{self.bucket}")
        response = await self._send(
            "DELETE", url, headers=self._auth_headers(), json={"prefixes": list(names)}
        )
        self._raise_for_status(response, action="remove")
        self.log.info(
            "storage.remove.done",
            extra={"bucket": self.bucket, "count": len(names)},
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if not self.base_url:
            raise StorageError("Storage URL is not configured")
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StorageError(f"Storage HTTP error: {exc}") from exc

    def _endpoint(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/storage/v1/{path}"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "apikey": self.api_key}

    @staticmethod
    def _raise_for_status(
        response: httpx.Response, *, action: str, name: str | None = None
    ) -> None:
        if response.status_code < 400:
            return
        target = f" '{name}'" if name else ""
        raise StorageError(
            f"Storage {action}{target} failed (status={response.status_code}): "
            f"{_extract_error(response)}"
        )


def _parse_entry(entry: dict[str, Any]) -> StoredObject:
    created_at = entry.get("created_at")
    parsed: datetime | None = None
    if isinstance(created_at, str) and created_at:
        try:
            parsed = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            logger.warning(
                "storage.list.bad_timestamp",
                extra={"object": entry.get("name"), "created_at": created_at},
            )
    return StoredObject(name=str(entry.get("name", "")), created_at=parsed)


def _extract_error(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        error = str(data.get("error") or "").strip()
        message = str(data.get("message") or "").strip()
        return " ".join(part for part in (error, message) if part) or str(data)
    return str(data)
