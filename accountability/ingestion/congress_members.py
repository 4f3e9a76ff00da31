"""
Adapter for current members of Congress from Congress.gov API.

This is the roster source: its facts seed every unified record.
API Docs: https://api.congress.gov/
"""
import logging
from typing import AsyncGenerator, Optional

from accountability.ingestion.base import BaseSourceAdapter, Page
from accountability.models.facts import RosterFact, SourceKind
from accountability.models.politician import Chamber
from accountability.storage.normalization import (
    normalize_chamber,
    normalize_party,
    normalize_state,
    split_name,
)

logger = logging.getLogger(__name__)


class CongressMembersAdapter(BaseSourceAdapter[RosterFact]):
    """
    Fetch current members of Congress from Congress.gov.

    Uses the /member endpoint with currentMember=true, paging with
    offset/limit until ``pagination.next`` disappears or a page comes back short.

    Usage:
        adapter = CongressMembersAdapter(settings.source_config("congress_gov"))
        facts = await adapter.fetch()                          # whole roster
        facts = await adapter.fetch(chamber="senate")          # one chamber
        facts = await adapter.fetch(bioguide_id="S000033")     # one member
    """

    name = "congress_members"
    source_kind = SourceKind.ROSTER

    def __init__(self, config, client=None, delay=None, fetch_details: bool = False):
        """
        Args:
            config: SourceConfig for Congress.gov
            client: Optional shared httpx.AsyncClient
            delay: Optional delay strategy for rate limiting
            fetch_details: If True, fetch each member's detail record for
                           sponsored/cosponsored bill counts (one extra request
                           per member, much slower)
        """
        super().__init__(config, client=client, delay=delay)
        self.fetch_details = fetch_details

    def auth_params(self) -> dict:
        return {"api_key": self.config.credential(), "format": "json"}

    async def fetch_data(
        self,
        chamber: Optional[str] = None,
        bioguide_id: Optional[str] = None,
    ) -> AsyncGenerator[dict, None]:
        """
        Fetch current members, or a single member.

        Args:
            chamber: Optional "house"/"senate" filter, applied as records arrive
            bioguide_id: Fetch only this member; unknown ids yield nothing

        Yields:
            Raw member data in the /member list shape
        """
        if bioguide_id:
            detail = await self.fetch_member_details(bioguide_id)
            if detail:
                yield self._detail_to_member(detail)
            return

        chamber_filter = normalize_chamber(chamber) if chamber else None
        if chamber_filter:
            self.logger.info(f"Chamber filter: {chamber_filter.value}")

        url = f"{self.config.base_url}/member"
        page_size = self.config.page_size

        async def fetch_page(index: int) -> Page:
            params = {
                "currentMember": "true",
                "offset": index * page_size,
                "limit": page_size,
            }
            data = await self.get_json(url, params, expect=dict)
            members = data.get("members", [])
            pagination = data.get("pagination", {})
            self.logger.info(
                f"Fetched {index * page_size + len(members)}/{pagination.get('count', '?')} members..."
            )
            return Page(items=members, has_next=bool(pagination.get("next")))

        async for member in self.paginate(fetch_page):
            if chamber_filter and self._current_chamber(member) != chamber_filter:
                continue

            if self.fetch_details and member.get("bioguideId"):
                detail = await self.fetch_member_details(member["bioguideId"])
                if detail:
                    member = {
                        **member,
                        "sponsoredLegislation": detail.get("sponsoredLegislation"),
                        "cosponsoredLegislation": detail.get("cosponsoredLegislation"),
                    }
                await self.sleep()

            yield member

    async def fetch_member_details(self, bioguide_id: str) -> Optional[dict]:
        """
        Fetch the detail record for one member.

        Returns:
            The ``member`` object, or None if Congress.gov has no such member
        """
        url = f"{self.config.base_url}/member/{bioguide_id}"
        self.logger.debug(f"Fetching details for {bioguide_id}...")
        data = await self.get_json(url, not_found_ok=True, expect=dict)
        if data is None:
            return None
        return data.get("member") or None

    @staticmethod
    def _detail_to_member(detail: dict) -> dict:
        """Reshape a /member/{id} record into the /member list shape."""
        name = detail.get("invertedOrderName")
        if not name and detail.get("lastName"):
            name = f"{detail['lastName']}, {detail.get('firstName', '')}"

        party_history = detail.get("partyHistory") or []
        party_name = party_history[-1].get("partyName") if party_history else detail.get("partyName")

        terms = detail.get("terms") or []
        if isinstance(terms, dict):
            terms = terms.get("item", [])

        return {
            "bioguideId": detail.get("bioguideId"),
            "name": name or detail.get("directOrderName", ""),
            "partyName": party_name,
            "state": detail.get("state"),
            "district": detail.get("district"),
            "depiction": detail.get("depiction"),
            "terms": {"item": terms},
            "sponsoredLegislation": detail.get("sponsoredLegislation"),
            "cosponsoredLegislation": detail.get("cosponsoredLegislation"),
        }

    @staticmethod
    def _current_chamber(member: dict) -> Chamber:
        """
        Chamber of the term still in progress.

        The current term is the first without an end year; if every term has
        ended we fall back to the first one listed.
        """
        terms = (member.get("terms") or {}).get("item") or []
        current = next((t for t in terms if not t.get("endYear")), terms[0] if terms else {})
        if normalize_chamber(current.get("chamber")) == Chamber.SENATE:
            return Chamber.SENATE
        return Chamber.HOUSE

    def transform(self, raw: dict) -> RosterFact:
        """
        Transform Congress.gov member data to a RosterFact.

        Raises:
            ValueError: If the record has no bioguideId
        """
        bioguide_id = raw.get("bioguideId")
        if not bioguide_id:
            raise ValueError(f"Missing bioguideId for {raw.get('name')!r}")

        # API returns "Last, First Middle"
        first_name, last_name = split_name(raw.get("name", ""))

        chamber = self._current_chamber(raw)
        district = None
        if chamber == Chamber.HOUSE:
            district = self.coerce_number(raw, "district", None, cast=int)

        state = normalize_state(raw.get("state"))
        if state is None and raw.get("state"):
            self.record_malformed("state", raw.get("state"), None)

        return RosterFact(
            legislator_id=bioguide_id,
            first_name=first_name,
            last_name=last_name,
            full_name=f"{first_name} {last_name}".strip(),
            party=normalize_party(raw.get("partyName")),
            state=state,
            chamber=chamber,
            district=district,
            photo_url=(raw.get("depiction") or {}).get("imageUrl"),
            bills_sponsored=(raw.get("sponsoredLegislation") or {}).get("count") or 0,
            bills_cosponsored=(raw.get("cosponsoredLegislation") or {}).get("count") or 0,
        )
