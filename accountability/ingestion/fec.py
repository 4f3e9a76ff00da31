"""
Adapter for campaign finance totals from the FEC.

The FEC (Federal Election Commission) API provides campaign finance data.
API docs: https://api.open.fec.gov/developers/

The FEC does not know bioguide ids, so this adapter works from roster facts:
each member is looked up as a candidate by last name, state, office and
district, and the best match's totals for one cycle become a FinanceFact.

Usage:
    adapter = FecFinanceAdapter(settings.source_config("fec"))
    facts = await adapter.fetch(members=roster_facts, cycle=2024)
"""
import logging
from typing import AsyncGenerator, Iterable, List, Optional

from accountability.config.constants import election_cycle
from accountability.ingestion.base import BaseSourceAdapter
from accountability.models.facts import FinanceFact, RosterFact, SourceKind
from accountability.models.politician import Chamber

logger = logging.getLogger(__name__)


def best_candidate(candidates: List[dict], full_name: str) -> Optional[dict]:
    """
    Pick the search result that looks like ``full_name``.

    FEC names read "SANDERS, BERNARD". A result matches when it contains the
    member's first name or when the member's name contains the result's last
    name. Falls back to the first result.
    """
    search = full_name.lower()
    first_name = search.split(" ")[0]

    for candidate in candidates:
        name = (candidate.get("name") or "").lower()
        last_name = name.split(",")[0].strip()
        if (first_name and first_name in name) or (last_name and last_name in search):
            return candidate

    return candidates[0] if candidates else None


class FecFinanceAdapter(BaseSourceAdapter[FinanceFact]):
    """
    Fetch candidate totals (receipts, disbursements, cash on hand) per member.

    Two requests per member: a candidate search, then the totals for the
    matched candidate id. Members with no match or no totals yield nothing.
    """

    name = "fec_finance"
    source_kind = SourceKind.FINANCE

    def auth_params(self) -> dict:
        return {"api_key": self.config.credential()}

    async def search_candidate(self, member: RosterFact) -> Optional[dict]:
        """
        Find the FEC candidate record for a roster member.

        Returns:
            The best-matching candidate, or None if the search came back empty
        """
        office = "H" if member.chamber == Chamber.HOUSE else "S"
        params = {
            "name": member.last_name.upper(),
            "office": office,
            "is_active_candidate": "true",
            "sort": "-election_years",
        }
        if member.state:
            params["state"] = member.state
        if office == "H" and member.district:
            params["district"] = f"{member.district:02d}"

        data = await self.get_json(f"{self.config.base_url}/candidates/", params, expect=dict)
        candidates = [c for c in data.get("results") or [] if isinstance(c, dict)]
        return best_candidate(candidates, member.full_name)

    async def fetch_totals(self, candidate_id: str, cycle: int) -> Optional[dict]:
        """Totals for one candidate and cycle, or None if the FEC has none."""
        params = {"candidate_id": candidate_id, "cycle": cycle}
        data = await self.get_json(
            f"{self.config.base_url}/candidates/totals/", params, not_found_ok=True, expect=dict
        )
        if data is None:
            return None
        results = data.get("results") or []
        return results[0] if results else None

    async def fetch_data(
        self,
        members: Iterable[RosterFact] = (),
        cycle: Optional[int] = None,
    ) -> AsyncGenerator[dict, None]:
        """
        Args:
            members: Roster facts to look up, in order
            cycle: Election cycle (defaults to the one that seated the configured congress)

        Yields:
            Raw FEC totals tagged with the member's bioguide id
        """
        cycle = cycle or election_cycle(self.config.congress)
        members = list(members)
        self.logger.info(f"Fetching FEC {cycle} totals for {len(members)} members...")

        found = 0
        for index, member in enumerate(members):
            if index:
                await self.sleep()

            candidate = await self.search_candidate(member)
            if not candidate or not candidate.get("candidate_id"):
                self.logger.debug(f"No FEC candidate for {member.full_name} ({member.state})")
                continue

            totals = await self.fetch_totals(candidate["candidate_id"], cycle)
            if totals is None:
                self.logger.debug(f"No {cycle} totals for {candidate['candidate_id']}")
                continue

            found += 1
            if not isinstance(totals, dict):
                yield totals
                continue
            yield {
                **totals,
                "bioguide_id": member.legislator_id,
                "candidate_id": candidate["candidate_id"],
                "cycle": cycle,
            }

        self.logger.info(f"Found finance data for {found}/{len(members)} members")

    def transform(self, raw: dict) -> FinanceFact:
        """
        Transform FEC totals.

        Unparseable amounts become 0 and are recorded as malformed.

        Raises:
            ValueError: If the record is not tagged with a member
        """
        if not raw.get("bioguide_id") or not raw.get("candidate_id"):
            raise ValueError(f"FEC totals without member or candidate: {raw!r}")

        return FinanceFact(
            legislator_id=raw["bioguide_id"],
            candidate_id=raw["candidate_id"],
            cycle=raw["cycle"],
            receipts=self.coerce_number(raw, "receipts", 0.0),
            disbursements=self.coerce_number(raw, "disbursements", 0.0),
            cash_on_hand=self.coerce_number(raw, "cash_on_hand_end_period", 0.0),
        )
