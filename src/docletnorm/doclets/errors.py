"""Typed error hierarchy for the doclet normalization pipeline.

Normalization rules themselves never raise; these errors cover pipeline
definition mistakes and reading or writing doclet dumps.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "DocletNormError",
    "DocletLoadError",
    "PipelineDefinitionError",
    "StageContractError",
]


@dataclass(slots=True)
class DocletNormError(RuntimeError):
    """Base error raised by :mod:`docletnorm`."""

    message: str

    def __post_init__(self) -> None:
        RuntimeError.__init__(self, self.message)


@dataclass(slots=True)
class PipelineDefinitionError(DocletNormError):
    """Raised when stage ordering or dependencies are inconsistent."""

    stage: str | None = None


@dataclass(slots=True)
class StageContractError(DocletNormError):
    """Raised when a stage returns a record set of a different size."""

    stage: str | None = None
    expected: int | None = None
    actual: int | None = None


@dataclass(slots=True)
class DocletLoadError(DocletNormError):
    """Raised when a doclet dump cannot be read or validated."""

    path: Path | None = None
