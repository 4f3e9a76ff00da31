"""
Unified per-legislator record models.

One record per bioguide id, seeded by a roster fact, with every other fact
kind attached as an ordered sequence and derived statistics computed once.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from accountability.models.facts import (
    CommitteeFact,
    FinanceFact,
    IdeologyFact,
    TradeFact,
    VoteFact,
)
from accountability.models.politician import Chamber, Party


class TickerCount(BaseModel):
    ticker: str
    count: int


class TradeStats(BaseModel):
    """
    Summary of a legislator's disclosed trading.

    Averages are None when there is nothing to average over.
    """
    total_trades: int = 0
    purchases: int = 0
    sales: int = 0
    total_purchase_value: int = 0
    total_sale_value: int = 0
    top_tickers: List[TickerCount] = Field(default_factory=list)
    avg_excess_return: Optional[float] = None
    avg_days_to_disclosure: Optional[int] = None
    late_disclosures: int = 0


class VoteStats(BaseModel):
    """
    Voting behaviour derived from vote and ideology facts.

    Percentages are None ("unknown") when their population is empty.
    """
    total_votes: int = 0
    missed_votes: int = 0
    missed_vote_pct: Optional[float] = None
    party_loyalty_pct: Optional[float] = None
    nominate_dim1: Optional[float] = None
    nominate_dim2: Optional[float] = None


class FinanceStats(BaseModel):
    """Campaign totals for the latest FEC cycle on record, in whole dollars."""
    cycle: int
    receipts: int = 0
    disbursements: int = 0
    cash_on_hand: int = 0


class UnifiedLegislatorRecord(BaseModel):
    """
    Everything we know about one legislator after a pipeline run.
    """

    # Identity (from the roster fact)
    bioguide_id: str = Field(..., description="Canonical id from Congress.gov")
    icpsr_id: Optional[str] = Field(None, description="Voteview id, if reconciled")
    first_name: str
    last_name: str
    full_name: str
    party: Party
    state: Optional[str] = None
    chamber: Chamber
    district: Optional[int] = Field(None, description="House district number (None for Senators)")
    photo_url: Optional[str] = None
    bills_sponsored: int = 0
    bills_cosponsored: int = 0

    # Fact sequences, in source-arrival order
    votes: List[VoteFact] = Field(default_factory=list)
    trades: List[TradeFact] = Field(default_factory=list)
    ideology: List[IdeologyFact] = Field(default_factory=list)
    committees: List[CommitteeFact] = Field(default_factory=list)
    finance: List[FinanceFact] = Field(default_factory=list)

    # Derived
    vote_stats: VoteStats = Field(default_factory=VoteStats)
    trade_stats: TradeStats = Field(default_factory=TradeStats)
    finance_stats: Optional[FinanceStats] = None

    def __str__(self) -> str:
        chamber_title = "Sen." if self.chamber == Chamber.SENATE else "Rep."
        district_str = f" (District {self.district})" if self.district else ""
        return f"{chamber_title} {self.full_name} ({self.party.value}-{self.state}){district_str}"
