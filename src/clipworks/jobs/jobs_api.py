"""HTTP routes for media jobs."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from ..api.errors import from_job_error, internal_error
from .job_errors import JobError, ValidationError
from .job_models import JobRequest, Operation
from .job_pipeline import JobPipeline

router = APIRouter(tags=["jobs"])
logger = logging.getLogger(__name__)


def get_job_pipeline(request: Request) -> JobPipeline:
    """Fetch the job pipeline from application state."""
    try:
        return request.app.state.job_pipeline  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - app wiring missing
        raise RuntimeError("JobPipeline is not configured") from exc


async def read_job_request(request: Request, operation: Operation) -> JobRequest:
    """Collect multipart files and fields without coercing empty values."""
    form = await request.form()
    job_request = JobRequest(operation=operation)
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if value.filename:
                job_request.files.setdefault(key, []).append(value)
        else:
            job_request.fields[key] = value
    return job_request


async def submit_job(
    operation: Operation, request: Request, pipeline: JobPipeline
) -> dict[str, object]:
    job_request = await read_job_request(request, operation)
    try:
        result = await pipeline.run(job_request)
    except ValidationError as exc:
        logger.warning(
            "jobs.request.invalid",
            extra={"operation": operation.value, "details": exc.details},
        )
        raise from_job_error(exc) from exc
    except JobError as exc:
        raise from_job_error(exc) from exc
    except Exception as exc:
        logger.exception("jobs.request.unexpected_error", extra={"operation": operation.value})
        raise internal_error(str(exc)) from exc
    return {"success": True, "downloadUrl": result.download_url}


@router.post("/trim")
async def trim(
    request: Request, pipeline: JobPipeline = Depends(get_job_pipeline)
) -> dict[str, object]:
    """Cut ``duration`` seconds starting at ``startTime`` without re-encoding."""
    return await submit_job(Operation.TRIM, request, pipeline)


@router.post("/crop")
async def crop(
    request: Request, pipeline: JobPipeline = Depends(get_job_pipeline)
) -> dict[str, object]:
    """Crop the video to the ``w``×``h`` rectangle at ``x``,``y``."""
    return await submit_job(Operation.CROP, request, pipeline)


@router.post("/add-voice")
async def add_voice(
    request: Request, pipeline: JobPipeline = Depends(get_job_pipeline)
) -> dict[str, object]:
    """Replace the video's audio track with the uploaded ``audio`` file."""
    return await submit_job(Operation.ADD_VOICE, request, pipeline)


@router.post("/add-caption")
async def add_caption(
    request: Request, pipeline: JobPipeline = Depends(get_job_pipeline)
) -> dict[str, object]:
    """Burn the uploaded ``subtitle`` file into the video frames."""
    return await submit_job(Operation.ADD_CAPTION, request, pipeline)


@router.post("/merge")
async def merge(
    request: Request, pipeline: JobPipeline = Depends(get_job_pipeline)
) -> dict[str, object]:
    """Concatenate exactly two files uploaded under ``videos``."""
    return await submit_job(Operation.MERGE, request, pipeline)
