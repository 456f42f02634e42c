from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.clipworks.media.retention_sweeper import RetentionSweeper, select_expired
from src.clipworks.storage.storage_base import StorageError, StoredObject
from tests.mocks.storage import InMemoryStorage

pytestmark = pytest.mark.unit

NOW = datetime(2024, 5, 2, 12, 0, tzinfo=timezone.utc)


def test_select_expired_is_strictly_older_than_window() -> None:
    objects = [
        StoredObject("old.mp4", NOW - timedelta(hours=25)),
        StoredObject("boundary.mp4", NOW - timedelta(hours=24)),
        StoredObject("fresh.mp4", NOW - timedelta(hours=1)),
        StoredObject("undated.mp4", None),
        StoredObject("", NOW - timedelta(days=3)),
    ]

    expired = select_expired(objects, now=NOW, max_age=timedelta(hours=24))

    assert expired == ["old.mp4"]


@pytest.mark.asyncio
async def test_sweep_once_removes_only_expired() -> None:
    storage = InMemoryStorage()
    storage.seed("trimmed_1.mp4", NOW - timedelta(hours=25))
    storage.seed("cropped_2.mp4", NOW - timedelta(hours=1))
    sweeper = RetentionSweeper(storage)

    removed = await sweeper.sweep_once(now=NOW)

    assert removed == ["trimmed_1.mp4"]
    assert set(storage.objects) == {"cropped_2.mp4"}


@pytest.mark.asyncio
async def test_sweep_once_skips_remove_when_nothing_expired() -> None:
    storage = InMemoryStorage()
    storage.seed("fresh.mp4", NOW - timedelta(minutes=5))
    sweeper = RetentionSweeper(storage)

    assert await sweeper.sweep_once(now=NOW) == []
    assert storage.remove_calls == []


@pytest.mark.asyncio
async def test_sweep_once_swallows_list_failure() -> None:
    storage = InMemoryStorage(fail_list=StorageError("timeout"))
    sweeper = RetentionSweeper(storage)

    assert await sweeper.sweep_once(now=NOW) == []


@pytest.mark.asyncio
async def test_sweep_once_swallows_remove_failure() -> None:
    storage = InMemoryStorage(fail_remove=StorageError("forbidden"))
    storage.seed("old.mp4", NOW - timedelta(days=2))
    sweeper = RetentionSweeper(storage)

    assert await sweeper.sweep_once(now=NOW) == []
    assert "old.mp4" in storage.objects


@pytest.mark.asyncio
async def test_find_expired_honours_custom_window() -> None:
    storage = InMemoryStorage()
    storage.seed("a.mp4", NOW - timedelta(hours=2))
    sweeper = RetentionSweeper(storage, max_age=timedelta(hours=1))

    assert await sweeper.find_expired(NOW) == ["a.mp4"]
