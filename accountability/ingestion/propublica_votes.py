"""
Adapter for recorded votes from the ProPublica Congress API.

API Docs: https://projects.propublica.org/api-docs/congress-api/
Requires API key (free, 5000 requests/day), sent as the X-API-Key header.
"""
import logging
from typing import AsyncGenerator, List, Optional

from accountability.ingestion.base import BaseSourceAdapter, Page
from accountability.models.facts import SourceKind, VoteFact
from accountability.storage.normalization import normalize_chamber, normalize_vote_position

logger = logging.getLogger(__name__)


def unwrap_results(data: dict) -> dict:
    """ProPublica wraps payloads in ``results`` as either an object or a one-item list."""
    results = data.get("results") if data else None
    if isinstance(results, list):
        results = results[0] if results else {}
    return results if isinstance(results, dict) else {}


class ProPublicaVotesAdapter(BaseSourceAdapter[VoteFact]):
    """
    Fetch member positions on roll call votes.

    Two variants:
        await adapter.fetch(chamber="senate", max_pages=5)   # recent chamber votes
        await adapter.fetch(bioguide_id="S000033")           # one member's votes

    Every yielded record is one member's position on one roll call.
    """

    name = "propublica_votes"
    source_kind = SourceKind.VOTES

    def auth_headers(self) -> dict:
        return {"X-API-Key": self.config.credential()}

    async def fetch_data(
        self,
        chamber: str = "house",
        bioguide_id: Optional[str] = None,
        max_pages: Optional[int] = 5,
    ) -> AsyncGenerator[dict, None]:
        """
        Args:
            chamber: "house" or "senate" for the recent-votes variant
            bioguide_id: Fetch this member's votes instead; unknown members yield nothing
            max_pages: Cap on recent-vote pages (the feed has no end cursor)

        Yields:
            Flat position records: member_id, position, roll call context
        """
        if bioguide_id:
            async for position in self._fetch_member_votes(bioguide_id):
                yield position
            return

        normalized = normalize_chamber(chamber)
        chamber_name = normalized.value if normalized else chamber
        url = f"{self.config.base_url}/{chamber_name}/votes/recent.json"
        page_size = self.config.page_size

        async def fetch_page(index: int) -> Page:
            offset = index * page_size
            self.logger.info(f"Fetching recent {chamber_name} votes (offset: {offset})...")
            data = await self.get_json(url, {"offset": offset}, expect=dict)
            votes = unwrap_results(data).get("votes", [])
            # No cursor: a full page means there may be more
            return Page(items=votes, has_next=True)

        async for vote in self.paginate(fetch_page, max_pages=max_pages):
            positions = vote.get("positions")
            if positions is None:
                positions = await self._fetch_positions(vote)
            for position in positions:
                yield self._flatten(vote, position.get("member_id"), position.get("vote_position"))

    async def _fetch_positions(self, vote: dict) -> List[dict]:
        """Member positions for one roll call, from its detail endpoint."""
        vote_uri = vote.get("vote_uri")
        if not vote_uri:
            return []
        data = await self.get_json(vote_uri, expect=dict)
        await self.sleep()
        detail = unwrap_results(data).get("votes", {})
        return (detail.get("vote") or {}).get("positions", [])

    async def _fetch_member_votes(self, bioguide_id: str) -> AsyncGenerator[dict, None]:
        url = f"{self.config.base_url}/members/{bioguide_id}/votes.json"
        self.logger.info(f"Fetching votes for member {bioguide_id}...")
        data = await self.get_json(url, not_found_ok=True, expect=dict)
        if data is None:
            return
        for vote in unwrap_results(data).get("votes", []):
            yield self._flatten(vote, vote.get("member_id") or bioguide_id, vote.get("position"))

    @staticmethod
    def _flatten(vote: dict, member_id: Optional[str], position: Optional[str]) -> dict:
        bill = vote.get("bill") or {}
        return {
            "member_id": member_id,
            "position": position,
            "congress": vote.get("congress"),
            "chamber": vote.get("chamber"),
            "roll_call": vote.get("roll_call"),
            "bill_id": bill.get("bill_id"),
            "date": vote.get("date"),
            "question": vote.get("question"),
            "result": vote.get("result"),
        }

    def transform(self, raw: dict) -> VoteFact:
        """
        Raises:
            ValueError: If the position has no member id or roll call number
        """
        member_id = raw.get("member_id")
        if not member_id or raw.get("roll_call") in (None, ""):
            raise ValueError(f"Vote position without member or roll call: {raw!r}")

        chamber = normalize_chamber(raw.get("chamber"))
        chamber_name = chamber.value if chamber else str(raw.get("chamber") or "").lower()

        return VoteFact(
            legislator_id=member_id,
            roll_call_id=f"{raw.get('congress')}-{chamber_name}-{raw.get('roll_call')}",
            position=normalize_vote_position(raw.get("position")),
            vote_date=raw.get("date"),
            question=raw.get("question"),
            result=raw.get("result"),
            bill_id=raw.get("bill_id"),
        )
