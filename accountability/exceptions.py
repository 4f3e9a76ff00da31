"""Exception hierarchy for the accountability pipeline.

Only run-affecting failures live here. Record-level anomalies (malformed
fields, unresolved ids, id conflicts) are collected, never raised; see
``accountability.models.report``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class PipelineError(Exception):
    """Base exception for pipeline errors."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class MissingCredential(PipelineError):
    """Raised before any network call when a required credential is absent."""

    source: str

    def __str__(self) -> str:
        return f"Missing credential for {self.source}: {self.message}"


@dataclass
class SourceUnavailable(PipelineError):
    """Raised when an upstream answers with a non-success status or times out."""

    source: str
    endpoint: str
    status_code: Optional[int] = None

    def __str__(self) -> str:
        status = f" (HTTP {self.status_code})" if self.status_code is not None else ""
        return f"{self.source} unavailable at {self.endpoint}{status}: {self.message}"


@dataclass
class SourceFailure(PipelineError):
    """An adapter invocation that failed, labeled with source and phase."""

    source: str
    phase: str
    cause: Optional[Exception] = None

    def __str__(self) -> str:
        return f"[{self.source}:{self.phase}] {self.message}"


@dataclass
class PipelineAborted(PipelineError):
    """Raised when the failure policy is "abort" and a source failed."""

    failures: list[SourceFailure] = field(default_factory=list)

    def __str__(self) -> str:
        labels = ", ".join(f"{f.source}:{f.phase}" for f in self.failures)
        return f"{self.message} ({labels})" if labels else self.message


@dataclass
class PersistenceError(PipelineError):
    """Raised when an output file cannot be written."""

    output_path: Path

    def __str__(self) -> str:
        return f"Failed to write output: {self.output_path}\n{self.message}"
