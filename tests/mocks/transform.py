"""Transform invoker doubles that never start ffmpeg."""

from __future__ import annotations

from src.clipworks.jobs.job_models import Job
from src.clipworks.transform.transform_base import (
    TransformFailed,
    TransformOutcome,
    TransformSucceeded,
)


class StubInvoker:
    """Write ``payload`` to the job output, or report ``failure``."""

    def __init__(
        self,
        *,
        payload: bytes = b"\x00\x00\x00\x18ftypmp42",
        failure: str | None = None,
        partial: bytes = b"",
    ) -> None:
        self.payload = payload
        self.failure = failure
        self.partial = partial
        self.jobs: list[Job] = []
        self.seen_inputs: list[list[bool]] = []

    async def run(self, job: Job) -> TransformOutcome:
        assert job.output is not None
        self.jobs.append(job)
        self.seen_inputs.append([path.exists() for path in job.inputs])
        if self.failure is not None:
            job.output.write_bytes(self.partial)
            return TransformFailed(self.failure)
        job.output.write_bytes(self.payload)
        return TransformSucceeded(job.output)
