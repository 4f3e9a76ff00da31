"""
Normalized facts: one source's contribution to a legislator's profile.

Each upstream produces exactly one kind of fact. Facts are a tagged union on
``source_kind`` so the merger can switch on the kind exhaustively instead of
probing optional fields.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from accountability.models.politician import Chamber, IdScheme, LegislatorIdentity, Party


class SourceKind(str, Enum):
    """Kind of fact an adapter produces."""
    ROSTER = "roster"
    VOTES = "votes"
    TRADES = "trades"
    IDEOLOGY = "ideology"
    COMMITTEES = "committees"
    FINANCE = "finance"


class VotePosition(str, Enum):
    """How a legislator voted."""
    YEA = "Yea"
    NAY = "Nay"
    PRESENT = "Present"
    NOT_VOTING = "Not Voting"


class TransactionType(str, Enum):
    """Direction of a disclosed stock trade."""
    PURCHASE = "Purchase"
    SALE = "Sale"
    EXCHANGE = "Exchange"


class _Fact(BaseModel):
    """Key shared by every fact: whichever id the source natively provides."""
    model_config = ConfigDict(frozen=True)

    legislator_id: str = Field(..., min_length=1)
    id_scheme: IdScheme = IdScheme.BIOGUIDE
    source: Optional[str] = Field(None, description="Label of the adapter invocation that produced it")


class RosterFact(_Fact):
    """
    A current member of Congress, from the roster source.

    Roster facts are the only facts that can materialize a unified record.
    """
    source_kind: Literal[SourceKind.ROSTER] = SourceKind.ROSTER

    icpsr_id: Optional[str] = None
    first_name: str
    last_name: str
    full_name: str
    party: Party
    state: Optional[str] = None
    chamber: Chamber
    district: Optional[int] = None
    photo_url: Optional[str] = None
    bills_sponsored: int = 0
    bills_cosponsored: int = 0

    def identity(self) -> LegislatorIdentity:
        return LegislatorIdentity(
            bioguide_id=self.legislator_id,
            icpsr_id=self.icpsr_id,
            chamber=self.chamber,
            state=self.state,
            district=self.district if self.chamber == Chamber.HOUSE else None,
        )


class VoteFact(_Fact):
    """One legislator's position on one roll call."""
    source_kind: Literal[SourceKind.VOTES] = SourceKind.VOTES

    roll_call_id: str = Field(..., description="{congress}-{chamber}-{roll number}")
    position: VotePosition
    vote_date: Optional[str] = None
    question: Optional[str] = None
    result: Optional[str] = None
    bill_id: Optional[str] = None
    category: Optional[str] = None


class TradeFact(_Fact):
    """One disclosed stock transaction."""
    source_kind: Literal[SourceKind.TRADES] = SourceKind.TRADES

    ticker: str
    company: Optional[str] = None
    transaction: TransactionType
    amount_usd: float = 0.0
    traded_date: Optional[str] = None
    filed_date: Optional[str] = None
    excess_return: Optional[float] = None


class IdeologyFact(_Fact):
    """DW-NOMINATE scores and vote counts for one member in one congress."""
    source_kind: Literal[SourceKind.IDEOLOGY] = SourceKind.IDEOLOGY

    icpsr_id: Optional[str] = None
    congress: int
    chamber: Optional[str] = None
    state: Optional[str] = None
    party_code: int = 0
    party: Party = Party.OTHER
    nominate_dim1: Optional[float] = None  # negative = liberal, positive = conservative
    nominate_dim2: Optional[float] = None
    number_of_votes: Optional[int] = None
    number_of_errors: Optional[int] = None  # votes against the party prediction


class SubcommitteeAssignment(BaseModel):
    """A seat on a subcommittee, nested under its parent committee."""
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    rank: Optional[int] = None
    is_chair: bool = False
    is_ranking_member: bool = False


class CommitteeFact(_Fact):
    """One legislator's seat on one committee."""
    source_kind: Literal[SourceKind.COMMITTEES] = SourceKind.COMMITTEES

    code: str = Field(..., description="ProPublica committee code, e.g. SSFI")
    name: str
    chamber: str = Field(..., description="house, senate or joint")
    side: Optional[str] = None  # majority / minority
    title: Optional[str] = None
    rank: Optional[int] = None
    is_chair: bool = False
    is_ranking_member: bool = False
    subcommittees: List[SubcommitteeAssignment] = Field(default_factory=list)


class FinanceFact(_Fact):
    """FEC campaign totals for one legislator's candidacy in one cycle."""
    source_kind: Literal[SourceKind.FINANCE] = SourceKind.FINANCE

    candidate_id: str
    cycle: int
    receipts: float = 0.0
    disbursements: float = 0.0
    cash_on_hand: float = 0.0


NormalizedFact = Annotated[
    Union[RosterFact, VoteFact, TradeFact, IdeologyFact, CommitteeFact, FinanceFact],
    Field(discriminator="source_kind"),
]

# Parses a dumped fact back into the right variant
fact_adapter = TypeAdapter(NormalizedFact)


def carries_both_ids(fact: NormalizedFact) -> bool:
    """True if the fact links a bioguide id to an ICPSR id."""
    if isinstance(fact, (RosterFact, IdeologyFact)):
        return fact.id_scheme == IdScheme.BIOGUIDE and bool(fact.icpsr_id)
    return False
