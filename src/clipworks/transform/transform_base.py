"""Terminal outcomes of a transform invocation."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class TransformSucceeded:
    """The engine exited cleanly and the output file is finalised."""

    output: Path


@dataclass(frozen=True, slots=True)
class TransformFailed:
    """The engine failed; nothing will write to the output any more."""

    reason: str


TransformOutcome = TransformSucceeded | TransformFailed
