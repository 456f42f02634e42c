"""Parsing of operation parameters and required uploads."""

from __future__ import annotations

import math
from collections.abc import Mapping

from starlette.datastructures import UploadFile

from .job_errors import ValidationError
from .job_models import (
    MISSING_INPUT_MESSAGES,
    OPERATION_INPUTS,
    CropParams,
    JobParams,
    Operation,
    TrimParams,
)

# Form field name -> dataclass attribute.
TRIM_FIELDS = {"startTime": "start_time", "duration": "duration"}
CROP_FIELDS = {"w": "w", "h": "h", "x": "x", "y": "y"}


def collect_uploads(
    operation: Operation, files: Mapping[str, list[UploadFile]]
) -> list[tuple[str, UploadFile]]:
    """Return ``(field, upload)`` pairs in the order the engine consumes them.

    Every declared field must carry exactly the declared number of files;
    anything else is reported with the operation's client-facing message.
    """
    message = MISSING_INPUT_MESSAGES[operation]
    collected: list[tuple[str, UploadFile]] = []
    missing: list[str] = []
    for slot in OPERATION_INPUTS[operation]:
        uploads = list(files.get(slot.field) or [])
        if len(uploads) != slot.count:
            missing.append(f"{slot.field} ({len(uploads)}/{slot.count})")
            continue
        collected.extend((slot.field, upload) for upload in uploads)
    if missing:
        raise ValidationError(message, f"expected files: {', '.join(missing)}")
    return collected


def parse_params(operation: Operation, form: Mapping[str, str]) -> JobParams:
    """Build typed parameters for ``operation`` from raw form fields.

    Defaults apply only to absent fields; a present field must hold a number.
    Values are not range-checked.
    """
    if operation is Operation.TRIM:
        return TrimParams(**_parse_numbers(form, TRIM_FIELDS, float))
    if operation is Operation.CROP:
        return CropParams(**_parse_numbers(form, CROP_FIELDS, int))
    return None


def _parse_numbers(form: Mapping[str, str], mapping: dict[str, str], kind: type) -> dict:
    values: dict[str, float | int] = {}
    for form_field, attribute in mapping.items():
        if form_field not in form:
            continue
        raw = form[form_field]
        values[attribute] = _coerce(form_field, raw, kind)
    return values


def _coerce(name: str, raw: str, kind: type) -> float | int:
    text = raw.strip() if isinstance(raw, str) else ""
    if not text:
        raise ValidationError(f"Parameter '{name}' must not be empty.", f"{name}={raw!r}")
    try:
        value = kind(text)
    except ValueError:
        expected = "an integer" if kind is int else "a number"
        raise ValidationError(
            f"Parameter '{name}' must be {expected}.", f"{name}={raw!r}"
        ) from None
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Parameter '{name}' must be a finite number.", f"{name}={raw!r}")
    return value

