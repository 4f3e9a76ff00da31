"""
Adapter for committee assignments from the ProPublica Congress API.

API Docs: https://projects.propublica.org/api-docs/congress-api/
Congress.gov v3 does not expose committee membership, so ProPublica is the
source. Requires the same X-API-Key as the votes adapter.
"""
import logging
from typing import AsyncGenerator, List, Optional

from accountability.ingestion.base import BaseSourceAdapter
from accountability.ingestion.propublica_votes import unwrap_results
from accountability.models.facts import CommitteeFact, SourceKind, SubcommitteeAssignment
from accountability.storage.normalization import (
    committee_chamber,
    committee_leadership,
    normalize_chamber,
)

logger = logging.getLogger(__name__)


class ProPublicaCommitteesAdapter(BaseSourceAdapter[CommitteeFact]):
    """
    Fetch committee seats, one fact per legislator per committee.

    Two variants:
        await adapter.fetch(chamber="senate")          # every committee's current members
        await adapter.fetch(bioguide_id="P000197")     # one member, with subcommittees
    """

    name = "propublica_committees"
    source_kind = SourceKind.COMMITTEES

    def auth_headers(self) -> dict:
        return {"X-API-Key": self.config.credential()}

    async def fetch_data(
        self,
        chamber: str = "house",
        bioguide_id: Optional[str] = None,
    ) -> AsyncGenerator[dict, None]:
        """
        Args:
            chamber: "house", "senate" or "joint" for the bulk variant
            bioguide_id: Fetch this member's assignments instead; a 404 means none

        Yields:
            Flat assignment records: member_id plus committee code, name and title
        """
        if bioguide_id:
            async for assignment in self._fetch_member_committees(bioguide_id):
                yield assignment
            return

        normalized = normalize_chamber(chamber)
        chamber_name = normalized.value if normalized else chamber
        base = f"{self.config.base_url}/{self.config.congress}/{chamber_name}/committees"

        self.logger.info(f"Fetching {chamber_name} committees for Congress {self.config.congress}...")
        data = await self.get_json(f"{base}.json", expect=dict)
        committees = unwrap_results(data).get("committees") or []
        self.logger.info(f"Found {len(committees)} {chamber_name} committees")

        for committee in committees:
            code = committee.get("id") if isinstance(committee, dict) else None
            if not code:
                continue

            await self.sleep()
            detail = unwrap_results(await self.get_json(f"{base}/{code}.json", expect=dict))
            for member in detail.get("current_members") or []:
                if not isinstance(member, dict):
                    yield member
                    continue
                yield {
                    "member_id": member.get("id"),
                    "code": code,
                    "name": detail.get("name") or committee.get("name"),
                    "side": member.get("side"),
                    "title": member.get("title"),
                    "rank_in_party": member.get("rank_in_party"),
                }

    async def _fetch_member_committees(self, bioguide_id: str) -> AsyncGenerator[dict, None]:
        url = f"{self.config.base_url}/members/{bioguide_id}.json"
        self.logger.info(f"Fetching committees for member {bioguide_id}...")
        data = await self.get_json(url, not_found_ok=True, expect=dict)
        if data is None:
            return

        roles = [r for r in unwrap_results(data).get("roles") or [] if isinstance(r, dict)]
        if not roles:
            return

        # Current term: the first role still open, else the most recent one
        role = next((r for r in roles if not r.get("end_date")), roles[0])
        subcommittees = role.get("subcommittees") or []

        for committee in role.get("committees") or []:
            code = committee.get("code")
            yield {
                "member_id": bioguide_id,
                "code": code,
                "name": committee.get("name"),
                "side": committee.get("side"),
                "title": committee.get("title"),
                "rank_in_party": committee.get("rank_in_party"),
                "subcommittees": [
                    s for s in subcommittees if s.get("parent_committee_id") == code
                ],
            }

    def _rank(self, raw: dict) -> Optional[int]:
        """rank_in_party; 0 and missing both mean unranked."""
        return self.coerce_number(raw, "rank_in_party", None, cast=int) or None

    def _subcommittees(self, raw: List[dict]) -> List[SubcommitteeAssignment]:
        assignments = []
        for sub in raw:
            if not sub.get("code"):
                continue
            is_chair, is_ranking = committee_leadership(sub.get("title"))
            assignments.append(SubcommitteeAssignment(
                code=sub["code"],
                name=sub.get("name") or sub["code"],
                rank=self._rank(sub),
                is_chair=is_chair,
                is_ranking_member=is_ranking,
            ))
        return assignments

    def transform(self, raw: dict) -> CommitteeFact:
        """
        Raises:
            ValueError: If the assignment has no member id or committee code
        """
        member_id = raw.get("member_id")
        code = raw.get("code")
        if not member_id or not code:
            raise ValueError(f"Committee seat without member or committee: {raw!r}")

        is_chair, is_ranking = committee_leadership(raw.get("title"))

        return CommitteeFact(
            legislator_id=member_id,
            code=code,
            name=raw.get("name") or code,
            chamber=committee_chamber(code),
            side=raw.get("side"),
            title=raw.get("title"),
            rank=self._rank(raw),
            is_chair=is_chair,
            is_ranking_member=is_ranking,
            subcommittees=self._subcommittees(raw.get("subcommittees") or []),
        )
