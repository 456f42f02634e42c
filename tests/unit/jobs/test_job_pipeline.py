from __future__ import annotations

import io
from pathlib import Path

import pytest
from starlette.datastructures import UploadFile

from src.clipworks.jobs.job_errors import (
    PayloadTooLargeError,
    TransformError,
    UploadError,
    ValidationError,
)
from src.clipworks.jobs.job_models import JobRequest, Operation
from src.clipworks.jobs.job_pipeline import PROCESSING_FAILED, JobPipeline
from src.clipworks.media.artifact_publisher import ArtifactPublisher
from src.clipworks.media.temp_file_store import TempFileStore
from src.clipworks.storage.storage_base import StorageError
from tests.mocks.storage import PUBLIC_BASE_URL, InMemoryStorage
from tests.mocks.transform import StubInvoker

pytestmark = pytest.mark.unit


def _file(name: str, data: bytes = b"media-bytes") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=name)


def _pipeline(
    store: TempFileStore, invoker: StubInvoker, storage: InMemoryStorage
) -> JobPipeline:
    return JobPipeline(
        temp_store=store, invoker=invoker, publisher=ArtifactPublisher(storage)
    )


def _scratch_files(root: Path) -> list[Path]:
    return sorted(root.iterdir())


@pytest.mark.asyncio
async def test_trim_job_uploads_artifact_and_cleans_up(temp_store, scratch_dir) -> None:
    storage = InMemoryStorage()
    invoker = StubInvoker()
    pipeline = _pipeline(temp_store, invoker, storage)

    result = await pipeline.run(
        JobRequest(Operation.TRIM, files={"video": [_file("in.mp4")]}, fields={"duration": "3"})
    )

    assert result.artifact_name.startswith("trimmed_")
    assert result.artifact_name.endswith(".mp4")
    assert result.download_url == f"{PUBLIC_BASE_URL}/{result.artifact_name}"
    assert storage.objects[result.artifact_name].payload == invoker.payload
    assert invoker.seen_inputs == [[True]]
    assert invoker.jobs[0].params.duration == 3.0
    assert _scratch_files(scratch_dir) == []


@pytest.mark.asyncio
async def test_merge_persists_both_inputs_in_order(temp_store, scratch_dir) -> None:
    invoker = StubInvoker()
    pipeline = _pipeline(temp_store, invoker, InMemoryStorage())

    await pipeline.run(
        JobRequest(
            Operation.MERGE,
            files={"videos": [_file("a.mp4", b"first"), _file("b.mp4", b"second")]},
        )
    )

    job = invoker.jobs[0]
    assert len(job.inputs) == 2
    assert job.inputs[0] != job.inputs[1]
    assert invoker.seen_inputs == [[True, True]]
    assert all(not path.exists() for path in job.touched_paths())
    assert _scratch_files(scratch_dir) == []


@pytest.mark.asyncio
async def test_validation_failure_allocates_nothing(temp_store, scratch_dir) -> None:
    storage = InMemoryStorage()
    invoker = StubInvoker()
    pipeline = _pipeline(temp_store, invoker, storage)

    with pytest.raises(ValidationError):
        await pipeline.run(JobRequest(Operation.ADD_VOICE, files={"video": [_file("v.mp4")]}))

    assert invoker.jobs == []
    assert storage.uploads == []
    assert _scratch_files(scratch_dir) == []


@pytest.mark.asyncio
async def test_transform_failure_never_uploads(temp_store, scratch_dir) -> None:
    storage = InMemoryStorage()
    invoker = StubInvoker(failure="ffmpeg exited with code 1: boom", partial=b"half")
    pipeline = _pipeline(temp_store, invoker, storage)

    with pytest.raises(TransformError) as excinfo:
        await pipeline.run(JobRequest(Operation.CROP, files={"video": [_file("v.mp4")]}))

    assert excinfo.value.message == PROCESSING_FAILED
    assert excinfo.value.details == "ffmpeg exited with code 1: boom"
    assert storage.uploads == []
    assert _scratch_files(scratch_dir) == []


@pytest.mark.asyncio
async def test_empty_output_counts_as_transform_failure(temp_store, scratch_dir) -> None:
    storage = InMemoryStorage()
    pipeline = _pipeline(temp_store, StubInvoker(payload=b""), storage)

    with pytest.raises(TransformError):
        await pipeline.run(JobRequest(Operation.TRIM, files={"video": [_file("v.mp4")]}))

    assert storage.uploads == []
    assert _scratch_files(scratch_dir) == []


@pytest.mark.asyncio
async def test_upload_failure_is_reported_and_cleaned(temp_store, scratch_dir) -> None:
    storage = InMemoryStorage(fail_upload=StorageError("bucket missing"))
    pipeline = _pipeline(temp_store, StubInvoker(), storage)

    with pytest.raises(UploadError) as excinfo:
        await pipeline.run(
            JobRequest(
                Operation.ADD_CAPTION,
                files={"video": [_file("v.mp4")], "subtitle": [_file("s.srt")]},
            )
        )

    assert excinfo.value.details == "bucket missing"
    assert _scratch_files(scratch_dir) == []


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected_and_cleaned(scratch_dir) -> None:
    store = TempFileStore(root=scratch_dir, max_upload_bytes=4, chunk_size=2)
    invoker = StubInvoker()
    pipeline = _pipeline(store, invoker, InMemoryStorage())

    with pytest.raises(PayloadTooLargeError):
        await pipeline.run(
            JobRequest(Operation.TRIM, files={"video": [_file("v.mp4", b"0123456789")]})
        )

    assert invoker.jobs == []
    assert _scratch_files(scratch_dir) == []


@pytest.mark.asyncio
async def test_unexpected_error_still_cleans_up(temp_store, scratch_dir) -> None:
    class ExplodingInvoker(StubInvoker):
        async def run(self, job):
            await super().run(job)
            raise RuntimeError("unexpected")

    pipeline = _pipeline(temp_store, ExplodingInvoker(), InMemoryStorage())

    with pytest.raises(RuntimeError):
        await pipeline.run(JobRequest(Operation.TRIM, files={"video": [_file("v.mp4")]}))

    assert _scratch_files(scratch_dir) == []
