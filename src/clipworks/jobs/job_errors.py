"""Domain-specific exceptions for the job pipeline."""

from __future__ import annotations


class JobError(Exception):
    """Base class for errors that terminate a job."""

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else message


class ValidationError(JobError):
    """Raised when required uploads or form fields are missing or malformed."""


class PayloadTooLargeError(JobError):
    """Raised when an uploaded file exceeds the configured size cap."""


class TransformError(JobError):
    """Raised when the transcoding engine fails or produces no output."""


class UploadError(JobError):
    """Raised when a finished artifact cannot be published to storage."""
