"""Data models module."""

from accountability.models.politician import (
    Chamber,
    IdScheme,
    LegislatorIdentity,
    Party,
)

from accountability.models.facts import (
    CommitteeFact,
    FinanceFact,
    IdeologyFact,
    NormalizedFact,
    RosterFact,
    SourceKind,
    SubcommitteeAssignment,
    TradeFact,
    TransactionType,
    VoteFact,
    VotePosition,
    carries_both_ids,
    fact_adapter,
)

from accountability.models.record import (
    FinanceStats,
    TickerCount,
    TradeStats,
    UnifiedLegislatorRecord,
    VoteStats,
)

from accountability.models.report import (
    MalformedRecord,
    ReconciliationConflict,
    RunReport,
    SourceReport,
    UnresolvedIdentity,
)

__all__ = [
    # Identity
    "Chamber",
    "IdScheme",
    "LegislatorIdentity",
    "Party",
    # Facts
    "CommitteeFact",
    "FinanceFact",
    "IdeologyFact",
    "NormalizedFact",
    "RosterFact",
    "SourceKind",
    "SubcommitteeAssignment",
    "TradeFact",
    "TransactionType",
    "VoteFact",
    "VotePosition",
    "carries_both_ids",
    "fact_adapter",
    # Records
    "FinanceStats",
    "TickerCount",
    "TradeStats",
    "UnifiedLegislatorRecord",
    "VoteStats",
    # Reporting
    "MalformedRecord",
    "ReconciliationConflict",
    "RunReport",
    "SourceReport",
    "UnresolvedIdentity",
]
