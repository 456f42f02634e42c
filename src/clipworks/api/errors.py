"""Reusable error primitives for API exception handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ..jobs.job_errors import (
    JobError,
    PayloadTooLargeError,
    TransformError,
    UploadError,
    ValidationError,
)
from ..jobs.job_models import FailureReason


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    failure_reason: FailureReason
    message: str
    details: str | None = None
    headers: Mapping[str, str] | None = None

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance."""

        content: dict[str, str] = {
            "error": self.message,
            "failure_reason": self.failure_reason.value,
        }
        if self.details is not None:
            content["details"] = self.details
        return JSONResponse(
            status_code=self.status_code,
            content=content,
            headers=dict(self.headers or {}),
        )


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Convert :class:`ApiError` exceptions into JSON payloads."""

    return exc.to_response()


_JOB_ERROR_STATUS: dict[type[JobError], tuple[int, FailureReason]] = {
    ValidationError: (status.HTTP_400_BAD_REQUEST, FailureReason.INVALID_REQUEST),
    PayloadTooLargeError: (
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        FailureReason.PAYLOAD_TOO_LARGE,
    ),
    TransformError: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        FailureReason.PROCESSING_FAILED,
    ),
    UploadError: (status.HTTP_500_INTERNAL_SERVER_ERROR, FailureReason.UPLOAD_FAILED),
}


def from_job_error(exc: JobError) -> ApiError:
    """Map a terminal job error onto its HTTP representation."""

    for error_type, (status_code, reason) in _JOB_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return ApiError(status_code, reason, exc.message, exc.details)
    return internal_error(exc.details)


def internal_error(details: str | None = None) -> ApiError:
    """Return an :class:`ApiError` for failures outside the job taxonomy."""

    return ApiError(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        FailureReason.INTERNAL_ERROR,
        "Internal server error.",
        details,
    )


__all__ = ["ApiError", "api_error_handler", "from_job_error", "internal_error"]
