"""Request → transform → upload → respond pipeline."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

import structlog

from ..media.artifact_publisher import ArtifactPublisher
from ..media.temp_file_store import TempFileStore
from ..transform.ffmpeg_invoker import TransformInvoker
from ..transform.transform_base import TransformFailed
from .job_errors import JobError, TransformError
from .job_models import OUTPUT_PREFIXES, OUTPUT_SUFFIX, Job, JobRequest, JobResult, JobState
from .job_params import collect_uploads, parse_params

logger = logging.getLogger(__name__)

PROCESSING_FAILED = "Video processing failed."


@dataclass(slots=True)
class JobPipeline:
    """Coordinate one job from validated input to a terminal response.

    Scratch cleanup is registered as soon as validation passes and runs
    exactly once, whichever branch ends the job.
    """

    temp_store: TempFileStore
    invoker: TransformInvoker
    publisher: ArtifactPublisher
    log: logging.Logger = field(default_factory=lambda: logger)

    def validate(self, request: JobRequest) -> Job:
        """Check required uploads and parse parameters; allocates nothing."""
        uploads = collect_uploads(request.operation, request.files)
        params = parse_params(request.operation, request.fields)
        return Job(
            job_id=uuid.uuid4().hex,
            operation=request.operation,
            params=params,
            uploads=uploads,
        )

    async def run(self, request: JobRequest) -> JobResult:
        job = self.validate(request)
        with structlog.contextvars.bound_contextvars(
            job_id=job.job_id, operation=job.operation.value
        ):
            try:
                result = await self._execute(job)
            except Exception as exc:
                job.state = JobState.FAILED
                details = exc.details if isinstance(exc, JobError) else str(exc)
                self.log.warning(
                    "job.failed",
                    extra={"error_type": type(exc).__name__, "details": details},
                )
                raise
            finally:
                self.temp_store.cleanup(job.touched_paths())
            job.state = JobState.SUCCEEDED
            self.log.info("job.completed", extra={"artifact": result.artifact_name})
            return result

    async def _execute(self, job: Job) -> JobResult:
        job.state = JobState.TRANSFORMING
        for field_name, upload in job.uploads:
            await self.temp_store.persist_upload(
                upload, field_name, on_allocate=job.inputs.append
            )
        job.output = self.temp_store.allocate(OUTPUT_PREFIXES[job.operation], OUTPUT_SUFFIX)

        outcome = await self.invoker.run(job)
        if isinstance(outcome, TransformFailed):
            raise TransformError(PROCESSING_FAILED, outcome.reason)
        if not outcome.output.is_file() or outcome.output.stat().st_size == 0:
            raise TransformError(PROCESSING_FAILED, "transform produced an empty output file")

        job.state = JobState.UPLOADING
        artifact_name = outcome.output.name
        url = await self.publisher.publish(outcome.output, artifact_name)
        return JobResult(job_id=job.job_id, artifact_name=artifact_name, download_url=url)
