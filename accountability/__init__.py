"""
Accountability data pipeline.

Fetches the congressional roster, recorded votes, stock trades and ideology
scores, reconciles bioguide and ICPSR ids, and writes one unified record per
legislator.
"""
from accountability.pipeline import (
    AdapterInvocation,
    FailurePolicy,
    Pipeline,
    build_default_invocations,
)

__version__ = "0.1.0"

__all__ = [
    "AdapterInvocation",
    "FailurePolicy",
    "Pipeline",
    "build_default_invocations",
]
