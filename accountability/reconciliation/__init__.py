"""Identity reconciliation and record merging."""
from accountability.reconciliation.identity import IdentityMap, count_unresolved
from accountability.reconciliation.merger import (
    MergeResult,
    RecordMerger,
    compute_finance_stats,
    compute_trade_stats,
    compute_vote_stats,
)

__all__ = [
    "IdentityMap",
    "count_unresolved",
    "MergeResult",
    "RecordMerger",
    "compute_finance_stats",
    "compute_trade_stats",
    "compute_vote_stats",
]
