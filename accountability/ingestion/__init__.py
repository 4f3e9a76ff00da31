"""Source adapters, one per upstream."""
from accountability.ingestion.base import BaseSourceAdapter, Page, no_delay
from accountability.ingestion.congress_members import CongressMembersAdapter
from accountability.ingestion.fec import FecFinanceAdapter, best_candidate
from accountability.ingestion.propublica_committees import ProPublicaCommitteesAdapter
from accountability.ingestion.propublica_votes import ProPublicaVotesAdapter
from accountability.ingestion.quiver_trades import QuiverTradesAdapter
from accountability.ingestion.voteview import (
    VoteviewMembersAdapter,
    VoteviewVotesAdapter,
    categorize_vote,
)

__all__ = [
    "BaseSourceAdapter",
    "Page",
    "no_delay",
    "CongressMembersAdapter",
    "FecFinanceAdapter",
    "ProPublicaCommitteesAdapter",
    "ProPublicaVotesAdapter",
    "QuiverTradesAdapter",
    "VoteviewMembersAdapter",
    "VoteviewVotesAdapter",
    "best_candidate",
    "categorize_vote",
]
