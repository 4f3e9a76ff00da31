"""
Run reporting models.

Record-level anomalies are collected here instead of being raised: a
malformed field gets a fallback value, an unresolved id gets dropped, an id
conflict keeps the first mapping. Operators read the tallies in the run report
to judge how complete the data is.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class MalformedRecord:
    """A field that failed to parse and was replaced with a fallback."""

    source: str
    field: str
    value: str
    fallback: Optional[float]


@dataclass(frozen=True)
class UnresolvedIdentity:
    """An alternate (ICPSR) key with no canonical counterpart."""

    alternate_id: str
    source_kind: str
    source: Optional[str] = None


@dataclass(frozen=True)
class ReconciliationConflict:
    """Two different mappings for the same id; ``kept_id`` won."""

    direction: str  # "icpsr->bioguide" or "bioguide->icpsr"
    key: str
    kept_id: str
    rejected_id: str


class SourceReport(BaseModel):
    """What one adapter invocation contributed to a run."""
    source: str
    fetched: int = 0
    malformed: int = 0
    merged: int = 0
    orphaned: int = 0
    unmapped: int = 0
    failed: bool = False
    failure: Optional[str] = None


class RunReport(BaseModel):
    """Counts per source and per fact kind for one pipeline run."""
    started_at: datetime
    completed_at: Optional[datetime] = None
    policy: str
    sources: List[SourceReport] = Field(default_factory=list)
    merged: Dict[str, int] = Field(default_factory=dict)
    orphaned: Dict[str, int] = Field(default_factory=dict)
    unmapped: Dict[str, int] = Field(default_factory=dict)
    duplicate_rosters: int = 0
    conflicts: int = 0
    legislators: int = 0

    @property
    def failed_sources(self) -> List[str]:
        return [s.source for s in self.sources if s.failed]
