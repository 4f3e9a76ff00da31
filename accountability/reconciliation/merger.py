"""
Fold normalized facts into unified legislator records.

Facts must already be in bioguide space (see ``IdentityMap.rewrite``).
Roster facts seed the records; every other fact attaches to a seeded record
or is counted as orphaned.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from accountability.config.constants import LATE_DISCLOSURE_DAYS, TOP_TICKERS_LIMIT
from accountability.models.facts import (
    FinanceFact,
    IdeologyFact,
    NormalizedFact,
    RosterFact,
    SourceKind,
    TradeFact,
    TransactionType,
    VoteFact,
    VotePosition,
)
from accountability.models.politician import IdScheme
from accountability.models.record import (
    FinanceStats,
    TickerCount,
    TradeStats,
    UnifiedLegislatorRecord,
    VoteStats,
)
from accountability.reconciliation.identity import IdentityMap
from accountability.storage.normalization import days_between, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Unified records plus the tallies the run report needs."""

    records: List[UnifiedLegislatorRecord] = field(default_factory=list)
    merged: Dict[str, int] = field(default_factory=dict)
    orphaned: Dict[str, int] = field(default_factory=dict)
    duplicate_rosters: int = 0
    # Same tallies keyed by the invocation label each fact carries
    merged_by_source: Dict[str, int] = field(default_factory=dict)
    orphaned_by_source: Dict[str, int] = field(default_factory=dict)


def _percent(part: int, whole: int) -> Optional[float]:
    """Percentage to one decimal place; None for an empty population."""
    if not whole:
        return None
    return round_half_up(part / whole * 100, 1)


def compute_vote_stats(votes: List[VoteFact], ideology: List[IdeologyFact]) -> VoteStats:
    """
    Voting statistics for one legislator.

    Missed votes are "Not Voting" positions among every recorded roll call.
    Party loyalty comes from Voteview: the share of scored votes that matched
    the party prediction, summed over every ideology fact with both counts.
    Ideology scores come from the last ideology fact.
    """
    missed = sum(1 for v in votes if v.position == VotePosition.NOT_VOTING)

    scored = [f for f in ideology if f.number_of_votes is not None and f.number_of_errors is not None]
    scored_votes = sum(f.number_of_votes for f in scored)
    scored_errors = sum(f.number_of_errors for f in scored)

    latest = ideology[-1] if ideology else None

    return VoteStats(
        total_votes=len(votes),
        missed_votes=missed,
        missed_vote_pct=_percent(missed, len(votes)),
        party_loyalty_pct=_percent(scored_votes - scored_errors, scored_votes),
        nominate_dim1=latest.nominate_dim1 if latest else None,
        nominate_dim2=latest.nominate_dim2 if latest else None,
    )


def compute_trade_stats(trades: List[TradeFact]) -> TradeStats:
    """
    Trading statistics for one legislator.

    Examples:
        AAPL purchase 1000, AAPL sale 500, MSFT purchase 2000
        -> purchases 3000, sales 500, top ticker AAPL (2)
    """
    purchases = [t for t in trades if t.transaction == TransactionType.PURCHASE]
    sales = [t for t in trades if t.transaction == TransactionType.SALE]

    # Counter keeps first-seen order and sorted() is stable, so ties stay in that order
    ticker_counts = Counter(t.ticker for t in trades)
    top = sorted(ticker_counts.items(), key=lambda item: item[1], reverse=True)[:TOP_TICKERS_LIMIT]

    returns = [t.excess_return for t in trades if t.excess_return is not None]
    avg_return = round_half_up(sum(returns) / len(returns), 2) if returns else None

    # A filing dated before its trade is bad upstream data, not a delay
    delays = [
        d for d in (days_between(t.traded_date, t.filed_date) for t in trades)
        if d is not None and d >= 0
    ]
    avg_delay = int(round_half_up(sum(delays) / len(delays))) if delays else None

    return TradeStats(
        total_trades=len(trades),
        purchases=len(purchases),
        sales=len(sales),
        total_purchase_value=int(round_half_up(sum(t.amount_usd for t in purchases))),
        total_sale_value=int(round_half_up(sum(t.amount_usd for t in sales))),
        top_tickers=[TickerCount(ticker=ticker, count=count) for ticker, count in top],
        avg_excess_return=avg_return,
        avg_days_to_disclosure=avg_delay,
        late_disclosures=sum(1 for d in delays if d > LATE_DISCLOSURE_DAYS),
    )


def compute_finance_stats(finance: List[FinanceFact]) -> Optional[FinanceStats]:
    """Whole-dollar totals for the latest cycle; several candidacies in it are summed."""
    if not finance:
        return None
    cycle = max(f.cycle for f in finance)
    current = [f for f in finance if f.cycle == cycle]
    return FinanceStats(
        cycle=cycle,
        receipts=int(round_half_up(sum(f.receipts for f in current))),
        disbursements=int(round_half_up(sum(f.disbursements for f in current))),
        cash_on_hand=int(round_half_up(sum(f.cash_on_hand for f in current))),
    )


class RecordMerger:
    """
    Two-pass merge: seed from roster facts, then attach everything else.

    The output does not depend on the order in which kinds of facts arrive:
    records are sorted by bioguide id and each fact sequence keeps the order
    of its own source.
    """

    def merge(
        self,
        facts: Iterable[NormalizedFact],
        identities: Optional[IdentityMap] = None,
    ) -> MergeResult:
        """
        Args:
            facts: Facts keyed by bioguide id; leftover ICPSR keys are orphaned
            identities: Used to fill in each record's ICPSR id

        Returns:
            MergeResult with records sorted by bioguide id
        """
        facts = list(facts)
        result = MergeResult()
        merged: Counter = Counter()
        orphaned: Counter = Counter()
        merged_by_source: Counter = Counter()
        orphaned_by_source: Counter = Counter()

        # Pass 1: seed
        seeds: Dict[str, RosterFact] = {}
        attached: Dict[str, Dict[SourceKind, list]] = {}
        for fact in facts:
            if not isinstance(fact, RosterFact):
                continue
            if fact.legislator_id in seeds:
                result.duplicate_rosters += 1
                logger.warning(f"Duplicate roster fact for {fact.legislator_id}, keeping the first")
                continue
            seeds[fact.legislator_id] = fact
            attached[fact.legislator_id] = {kind: [] for kind in SourceKind if kind != SourceKind.ROSTER}
            merged[SourceKind.ROSTER.value] += 1
            if fact.source:
                merged_by_source[fact.source] += 1

        # Pass 2: attach
        for fact in facts:
            if isinstance(fact, RosterFact):
                continue
            kind = fact.source_kind
            if fact.id_scheme != IdScheme.BIOGUIDE or fact.legislator_id not in seeds:
                orphaned[kind.value] += 1
                if fact.source:
                    orphaned_by_source[fact.source] += 1
                continue
            attached[fact.legislator_id][kind].append(fact)
            merged[kind.value] += 1
            if fact.source:
                merged_by_source[fact.source] += 1

        for bioguide_id in sorted(seeds):
            result.records.append(
                self._build_record(seeds[bioguide_id], attached[bioguide_id], identities)
            )

        result.merged = dict(sorted(merged.items()))
        result.orphaned = dict(sorted(orphaned.items()))
        result.merged_by_source = dict(sorted(merged_by_source.items()))
        result.orphaned_by_source = dict(sorted(orphaned_by_source.items()))

        logger.info(
            f"Merged {len(result.records)} legislators "
            f"(orphaned: {sum(orphaned.values())}, duplicate rosters: {result.duplicate_rosters})"
        )
        return result

    def _build_record(
        self,
        roster: RosterFact,
        attached: Dict[SourceKind, list],
        identities: Optional[IdentityMap],
    ) -> UnifiedLegislatorRecord:
        votes = attached[SourceKind.VOTES]
        trades = attached[SourceKind.TRADES]
        ideology = attached[SourceKind.IDEOLOGY]
        committees = attached[SourceKind.COMMITTEES]
        finance = attached[SourceKind.FINANCE]

        icpsr_id = identities.to_alternate(roster.legislator_id) if identities else None
        if icpsr_id is None:
            icpsr_id = roster.icpsr_id or next((f.icpsr_id for f in ideology if f.icpsr_id), None)

        identity = roster.identity()
        return UnifiedLegislatorRecord(
            bioguide_id=identity.bioguide_id,
            icpsr_id=icpsr_id,
            first_name=roster.first_name,
            last_name=roster.last_name,
            full_name=roster.full_name,
            party=roster.party,
            state=identity.state,
            chamber=identity.chamber,
            district=identity.district,
            photo_url=roster.photo_url,
            bills_sponsored=roster.bills_sponsored,
            bills_cosponsored=roster.bills_cosponsored,
            votes=votes,
            trades=trades,
            ideology=ideology,
            committees=committees,
            finance=finance,
            vote_stats=compute_vote_stats(votes, ideology),
            trade_stats=compute_trade_stats(trades),
            finance_stats=compute_finance_stats(finance),
        )
