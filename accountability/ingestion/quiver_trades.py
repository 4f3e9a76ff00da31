"""
Adapter for congressional stock trades from Quiver Quant API.

API Docs: https://api.quiverquant.com/docs
Requires paid API key, sent as "Authorization: Token <key>".

Data includes:
- Stock ticker and company
- Transaction type (Purchase/Sale)
- Trade size in USD
- Filing date vs trade date
- Excess return vs market
"""
import logging
from datetime import date
from typing import AsyncGenerator, Optional

from accountability.ingestion.base import BaseSourceAdapter, Page
from accountability.models.facts import SourceKind, TradeFact
from accountability.storage.normalization import days_between, normalize_transaction

logger = logging.getLogger(__name__)


class QuiverTradesAdapter(BaseSourceAdapter[TradeFact]):
    """
    Fetch disclosed stock trades.

    Usage:
        trades = await adapter.fetch(since=date(2024, 1, 1))   # bulk, everyone
        trades = await adapter.fetch(bioguide_id="P000197")    # one member
    """

    name = "quiver_trades"
    source_kind = SourceKind.TRADES

    def auth_headers(self) -> dict:
        return {"Authorization": f"Token {self.config.credential()}"}

    async def fetch_data(
        self,
        since: Optional[date] = None,
        bioguide_id: Optional[str] = None,
    ) -> AsyncGenerator[dict, None]:
        """
        Args:
            since: Only trades on or after this date (bulk variant)
            bioguide_id: Fetch this member's trades instead; a 404 means no trades

        Yields:
            Raw Quiver trade records
        """
        if bioguide_id:
            url = f"{self.config.base_url}/historical/congresstrading/{bioguide_id}"
            data = await self.get_json(url, not_found_ok=True, expect=list)
            if data is None:
                self.logger.info(f"No trades found for {bioguide_id}")
                return
            for trade in data:
                yield trade
            return

        url = f"{self.config.base_url}/bulk/congresstrading"
        page_size = self.config.page_size

        async def fetch_page(index: int) -> Page:
            params = {"page": index + 1, "page_size": page_size}
            if since:
                params["traded_gte"] = since.isoformat()
            self.logger.info(f"Fetching trades page {index + 1}...")
            data = await self.get_json(url, params, expect=list)
            # Bulk endpoint returns a bare list; a short page is the last one
            return Page(items=data or [], has_next=True)

        async for trade in self.paginate(fetch_page):
            yield trade

    def transform(self, raw: dict) -> TradeFact:
        """
        Transform a Quiver trade record.

        Unparseable sizes become 0; unparseable excess returns become None.
        A filing date before the trade date is dropped (None).

        Raises:
            ValueError: If the trade has no BioGuideID or ticker
        """
        bioguide_id = raw.get("BioGuideID")
        ticker = (raw.get("Ticker") or "").strip()
        if not bioguide_id or not ticker:
            raise ValueError(f"Trade without member or ticker: {raw!r}")

        traded_date = raw.get("Traded")
        filed_date = raw.get("Filed")
        delay = days_between(traded_date, filed_date)
        if delay is not None and delay < 0:
            self.record_malformed("Filed", filed_date, None)
            filed_date = None

        return TradeFact(
            legislator_id=bioguide_id,
            ticker=ticker,
            company=raw.get("Company"),
            transaction=normalize_transaction(raw.get("Transaction")),
            amount_usd=self.coerce_number(raw, "Trade_Size_USD", 0.0),
            traded_date=traded_date,
            filed_date=filed_date,
            excess_return=self.coerce_number(raw, "excess_return", None),
        )
