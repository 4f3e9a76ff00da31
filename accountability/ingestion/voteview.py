"""
Adapters for Voteview (UCLA) CSV data.

Voteview keys members by ICPSR id; the members file is also where ICPSR ids
get linked to bioguide ids.

Data includes:
- DW-NOMINATE ideology scores (dim1: liberal-conservative)
- Vote counts and prediction errors
- Every member's cast code on every roll call

Docs: https://voteview.com/data
"""
import asyncio
import logging
from typing import AsyncGenerator, Dict, List, Optional, Tuple

from accountability.config.constants import (
    KEY_VOTE_CATEGORIES,
    OTHER_VOTE_CATEGORY,
    VOTEVIEW_CAST_CODES,
    VOTEVIEW_CHAMBERS,
    VOTEVIEW_PARTY_CODES,
)
from accountability.ingestion.base import BaseSourceAdapter
from accountability.models.facts import IdeologyFact, SourceKind, VoteFact, VotePosition
from accountability.models.politician import IdScheme, Party
from accountability.storage.normalization import normalize_chamber, normalize_state, parse_csv

logger = logging.getLogger(__name__)


def categorize_vote(rollcall: dict) -> str:
    """
    Key-vote category for a roll call, from its bill number and descriptions.

    Examples:
        >>> categorize_vote({"vote_desc": "Medicare Advantage reform"})
        'Healthcare'
    """
    text = " ".join(
        rollcall.get(column) or "" for column in ("bill_number", "vote_desc", "dtl_desc")
    ).lower()
    for category, keywords in KEY_VOTE_CATEGORIES:
        if any(keyword in text for keyword in keywords):
            return category
    return OTHER_VOTE_CATEGORY


def _summarize_result(vote_result: Optional[str]) -> str:
    text = (vote_result or "").lower()
    if "passed" in text or "agreed" in text:
        return "Passed"
    if "failed" in text or "rejected" in text:
        return "Failed"
    return "Unknown"


class _VoteviewAdapter:
    """Shared file layout for both Voteview adapters (mixed into BaseSourceAdapter)."""

    requires_credential = False

    def _csv_url(self, dataset: str, chamber: str) -> str:
        prefix = VOTEVIEW_CHAMBERS[chamber]
        return f"{self.config.base_url}/{dataset}/{prefix}{self.config.congress:03d}_{dataset}.csv"

    async def _fetch_csv(self, dataset: str, chamber: str) -> List[Dict[str, str]]:
        url = self._csv_url(dataset, chamber)
        self.logger.info(f"Fetching Voteview {chamber} {dataset}...")
        rows = parse_csv(await self.get_text(url))
        self.logger.info(f"  Got {chamber} {dataset}: {len(rows)} rows")
        return rows

    def _chambers(self, chamber: Optional[str]) -> Tuple[str, ...]:
        if chamber:
            normalized = normalize_chamber(chamber)
            if normalized is None:
                raise ValueError(f"Unknown chamber: {chamber}")
            return (normalized.value,)
        return tuple(VOTEVIEW_CHAMBERS)


class VoteviewMembersAdapter(_VoteviewAdapter, BaseSourceAdapter[IdeologyFact]):
    """
    Fetch DW-NOMINATE scores from the Voteview members files.

    Both chambers are downloaded concurrently; rows are always yielded house
    first, then senate, so output order does not depend on download timing.
    """

    name = "voteview_members"
    source_kind = SourceKind.IDEOLOGY

    async def fetch_data(self, chamber: Optional[str] = None) -> AsyncGenerator[dict, None]:
        chambers = self._chambers(chamber)
        files = await asyncio.gather(*(self._fetch_csv("members", c) for c in chambers))
        for rows in files:
            for row in rows:
                yield row

    def transform(self, raw: dict) -> IdeologyFact:
        """
        Transform a Voteview member row.

        Rows without a bioguide id are keyed by ICPSR id and left for the
        identity reconciler to resolve or drop.

        Raises:
            ValueError: If the row has neither id
        """
        bioguide_id = (raw.get("bioguide_id") or "").strip()
        icpsr = self.coerce_number(raw, "icpsr", None, cast=int)
        icpsr_id = str(icpsr) if icpsr is not None else None

        if bioguide_id:
            legislator_id, id_scheme = bioguide_id, IdScheme.BIOGUIDE
        elif icpsr_id:
            legislator_id, id_scheme = icpsr_id, IdScheme.ICPSR
        else:
            raise ValueError(f"Voteview row without bioguide or icpsr id: {raw.get('bioname')!r}")

        party_code = self.coerce_number(raw, "party_code", 0, cast=int)

        return IdeologyFact(
            legislator_id=legislator_id,
            id_scheme=id_scheme,
            icpsr_id=icpsr_id,
            congress=self.coerce_number(raw, "congress", self.config.congress, cast=int),
            chamber=raw.get("chamber") or None,
            state=normalize_state(raw.get("state_abbrev")),
            party_code=party_code,
            party=Party(VOTEVIEW_PARTY_CODES.get(party_code, Party.OTHER.value)),
            nominate_dim1=self.coerce_number(raw, "nominate_dim1", None),
            nominate_dim2=self.coerce_number(raw, "nominate_dim2", None),
            number_of_votes=self.coerce_number(raw, "nominate_number_of_votes", None, cast=int),
            number_of_errors=self.coerce_number(raw, "nominate_number_of_errors", None, cast=int),
        )


class VoteviewVotesAdapter(_VoteviewAdapter, BaseSourceAdapter[VoteFact]):
    """
    Fetch every member's cast code on every roll call.

    Facts come out keyed by ICPSR id and must go through the identity
    reconciler before merging. Each vote is annotated with its roll call's
    date, question, result and key-vote category.
    """

    name = "voteview_votes"
    source_kind = SourceKind.VOTES

    async def fetch_data(
        self,
        chamber: Optional[str] = None,
        key_votes_only: bool = False,
    ) -> AsyncGenerator[dict, None]:
        """
        Args:
            chamber: Optional "house"/"senate"; both by default
            key_votes_only: Keep only roll calls that fall in a key-vote category

        Yields:
            Vote rows merged with their roll call context
        """
        chambers = self._chambers(chamber)
        downloads = await asyncio.gather(
            *(self._fetch_csv(dataset, c) for c in chambers for dataset in ("rollcalls", "votes"))
        )

        for i, chamber_name in enumerate(chambers):
            rollcalls, votes = downloads[2 * i], downloads[2 * i + 1]

            context = {}
            for rc in rollcalls:
                category = categorize_vote(rc)
                if key_votes_only and category == OTHER_VOTE_CATEGORY:
                    continue
                context[rc.get("rollnumber")] = {
                    "date": rc.get("date") or None,
                    "question": rc.get("vote_question") or None,
                    "result": _summarize_result(rc.get("vote_result")),
                    "bill_number": rc.get("bill_number") or None,
                    "category": category,
                }
            self.logger.info(f"  {chamber_name}: {len(context)} roll calls selected")

            for vote in votes:
                rollcall = context.get(vote.get("rollnumber"))
                if rollcall is None and (key_votes_only or rollcalls):
                    continue
                if vote.get("cast_code") == "0":
                    # Not a member of the chamber at the time of the vote
                    continue
                yield {**vote, "chamber_name": chamber_name, "rollcall": rollcall or {}}

    def transform(self, raw: dict) -> VoteFact:
        """
        Raises:
            ValueError: If the row has no ICPSR id or roll number
        """
        icpsr = self.coerce_number(raw, "icpsr", None, cast=int)
        rollnumber = self.coerce_number(raw, "rollnumber", None, cast=int)
        if icpsr is None or rollnumber is None:
            raise ValueError(f"Vote row without icpsr or rollnumber: {raw!r}")

        congress = self.coerce_number(raw, "congress", self.config.congress, cast=int)

        cast_code = self.coerce_number(raw, "cast_code", None, cast=int)
        position = VOTEVIEW_CAST_CODES.get(cast_code)
        if position is None:
            self.record_malformed("cast_code", raw.get("cast_code"), None)
            position = VotePosition.NOT_VOTING.value

        rollcall = raw.get("rollcall") or {}
        return VoteFact(
            legislator_id=str(icpsr),
            id_scheme=IdScheme.ICPSR,
            roll_call_id=f"{congress}-{raw['chamber_name']}-{rollnumber}",
            position=VotePosition(position),
            vote_date=rollcall.get("date"),
            question=rollcall.get("question"),
            result=rollcall.get("result"),
            bill_id=rollcall.get("bill_number"),
            category=rollcall.get("category"),
        )
