"""Data structures for the job pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from starlette.datastructures import UploadFile


class Operation(StrEnum):
    """Transformations exposed over HTTP."""

    TRIM = "trim"
    CROP = "crop"
    ADD_VOICE = "add_voice"
    ADD_CAPTION = "add_caption"
    MERGE = "merge"


class JobState(StrEnum):
    """Lifecycle states of a single job."""

    VALIDATING = "validating"
    TRANSFORMING = "transforming"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureReason(StrEnum):
    """Failure tags returned in error payloads."""

    INVALID_REQUEST = "invalid_request"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    PROCESSING_FAILED = "processing_failed"
    UPLOAD_FAILED = "upload_failed"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True, slots=True)
class InputSlot:
    """Multipart field expected by an operation and how many files it takes."""

    field: str
    count: int = 1


@dataclass(frozen=True, slots=True)
class TrimParams:
    start_time: float = 0.0
    duration: float = 5.0


@dataclass(frozen=True, slots=True)
class CropParams:
    w: int = 1080
    h: int = 1920
    x: int = 0
    y: int = 0


JobParams = TrimParams | CropParams | None


OPERATION_INPUTS: dict[Operation, tuple[InputSlot, ...]] = {
    Operation.TRIM: (InputSlot("video"),),
    Operation.CROP: (InputSlot("video"),),
    Operation.ADD_VOICE: (InputSlot("video"), InputSlot("audio")),
    Operation.ADD_CAPTION: (InputSlot("video"), InputSlot("subtitle")),
    Operation.MERGE: (InputSlot("videos", count=2),),
}

MISSING_INPUT_MESSAGES: dict[Operation, str] = {
    Operation.TRIM: "Video file required.",
    Operation.CROP: "Video file required.",
    Operation.ADD_VOICE: "Video and Audio files required.",
    Operation.ADD_CAPTION: "Video and .srt Subtitle files required.",
    Operation.MERGE: "Exactly 2 videos required.",
}

OUTPUT_PREFIXES: dict[Operation, str] = {
    Operation.TRIM: "trimmed",
    Operation.CROP: "cropped",
    Operation.ADD_VOICE: "voiced",
    Operation.ADD_CAPTION: "captioned",
    Operation.MERGE: "merged",
}

OUTPUT_SUFFIX = ".mp4"


@dataclass(slots=True)
class JobRequest:
    """Raw multipart payload collected by the HTTP layer."""

    operation: Operation
    files: dict[str, list[UploadFile]] = field(default_factory=dict)
    fields: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class Job:
    """One in-flight request and every scratch path it has touched."""

    job_id: str
    operation: Operation
    params: JobParams = None
    uploads: list[tuple[str, UploadFile]] = field(default_factory=list)
    inputs: list[Path] = field(default_factory=list)
    auxiliary: list[Path] = field(default_factory=list)
    output: Path | None = None
    state: JobState = JobState.VALIDATING

    def touched_paths(self) -> list[Path]:
        paths = [*self.inputs, *self.auxiliary]
        if self.output is not None:
            paths.append(self.output)
        return paths


@dataclass(slots=True)
class JobResult:
    job_id: str
    artifact_name: str
    download_url: str
