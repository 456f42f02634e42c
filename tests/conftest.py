from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

os.environ.setdefault(
    "CLIPWORKS_SCRATCH_DIR", str(Path(tempfile.gettempdir()) / "clipworks-tests")
)
os.environ.setdefault("CLIPWORKS_STORAGE_URL", "https://storage.clipworks.test")
os.environ.setdefault("CLIPWORKS_STORAGE_KEY", "test-service-key")

from src.clipworks.media.temp_file_store import TempFileStore  # noqa: E402


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "scratch"
    directory.mkdir()
    return directory


@pytest.fixture
def temp_store(scratch_dir: Path) -> TempFileStore:
    return TempFileStore(root=scratch_dir, max_upload_bytes=1024, chunk_size=64)
