"""ffmpeg-backed transform invoker."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import ffmpeg

from ..jobs.job_models import CropParams, Job, Operation, TrimParams
from ..media.temp_file_store import TempFileStore
from .transform_base import TransformFailed, TransformOutcome, TransformSucceeded

logger = logging.getLogger(__name__)

GLOBAL_ARGS = ("-hide_banner", "-nostdin", "-loglevel", "error")


@dataclass(slots=True)
class TransformInvoker:
    """Translate a :class:`Job` into one ffmpeg run and wait for its outcome.

    Every invocation carries the same resource constraints (thread count and
    encoder preset) so a single transform stays small on constrained hosts.
    """

    temp_store: TempFileStore
    binary: str = "ffmpeg"
    threads: int = 1
    preset: str = "ultrafast"
    log: logging.Logger = field(default_factory=lambda: logger)

    def build(self, job: Job) -> Any:
        """Return the ffmpeg stream spec for ``job``."""
        if job.output is None:
            raise ValueError("Job output path is not allocated")
        output = str(job.output)
        limits = {"threads": self.threads, "preset": self.preset}

        if job.operation is Operation.TRIM:
            params = job.params if isinstance(job.params, TrimParams) else TrimParams()
            source = ffmpeg.input(str(job.inputs[0]), ss=_format_seconds(params.start_time))
            stream = source.output(
                output, t=_format_seconds(params.duration), c="copy", **limits
            )
        elif job.operation is Operation.CROP:
            params = job.params if isinstance(job.params, CropParams) else CropParams()
            crop = f"crop={params.w}:{params.h}:{params.x}:{params.y}"
            stream = ffmpeg.input(str(job.inputs[0])).output(output, vf=crop, **limits)
        elif job.operation is Operation.ADD_VOICE:
            video = ffmpeg.input(str(job.inputs[0]))
            audio = ffmpeg.input(str(job.inputs[1]))
            stream = ffmpeg.output(
                video["v:0"],
                audio["a:0"],
                output,
                shortest=None,
                **{"c:v": "copy"},
                **limits,
            )
        elif job.operation is Operation.ADD_CAPTION:
            subtitles = _escape_filter_path(job.inputs[1].resolve())
            stream = ffmpeg.input(str(job.inputs[0])).output(
                output, vf=f"subtitles={subtitles}", **limits
            )
        elif job.operation is Operation.MERGE:
            manifest = self._write_concat_manifest(job)
            stream = ffmpeg.input(str(manifest), f="concat", safe=0).output(output, **limits)
        else:  # pragma: no cover - exhaustive over Operation
            raise ValueError(f"Unsupported operation '{job.operation}'")

        return stream.global_args(*GLOBAL_ARGS)

    async def run(self, job: Job) -> TransformOutcome:
        """Run the engine to completion and report exactly one outcome."""
        stream = self.build(job)
        self.log.info(
            "transform.start",
            extra={
                "operation": job.operation.value,
                "command": ffmpeg.compile(stream, cmd=self.binary, overwrite_output=True),
            },
        )
        try:
            process = ffmpeg.run_async(
                stream, cmd=self.binary, pipe_stderr=True, overwrite_output=True
            )
        except OSError as exc:
            return TransformFailed(f"Cannot start {self.binary}: {exc}")

        try:
            _, stderr = await asyncio.to_thread(process.communicate)
        finally:
            if process.poll() is None:
                process.kill()
                process.wait()

        if process.returncode != 0:
            reason = _failure_reason(process.returncode, stderr)
            self.log.warning(
                "transform.failed",
                extra={"operation": job.operation.value, "reason": reason},
            )
            return TransformFailed(reason)

        self.log.info(
            "transform.done",
            extra={"operation": job.operation.value, "output": str(job.output)},
        )
        return TransformSucceeded(output=job.output)

    def _write_concat_manifest(self, job: Job) -> Path:
        manifest = self.temp_store.allocate("concat", ".txt")
        job.auxiliary.append(manifest)
        lines = [f"file '{_quote_concat_path(path.resolve())}'" for path in job.inputs]
        manifest.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return manifest


def _format_seconds(value: float) -> str:
    text = format(value, "f").rstrip("0").rstrip(".")
    return text if text not in {"", "-0"} else "0"


def _escape_filter_path(path: Path) -> str:
    text = str(path)
    for char in ("\\", "'", ":"):
        text = text.replace(char, f"\\{char}")
    return text


def _quote_concat_path(path: Path) -> str:
    return str(path).replace("'", "'\\''")


def _failure_reason(returncode: int, stderr: bytes | None) -> str:
    lines = [
        line.strip()
        for line in (stderr or b"").decode("utf-8", errors="replace").splitlines()
        if line.strip()
    ]
    detail = lines[-1] if lines else "no diagnostic output"
    return f"ffmpeg exited with code {returncode}: {detail}"
