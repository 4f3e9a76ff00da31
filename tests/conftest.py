"""Shared pytest fixtures for accountability pipeline tests."""

import httpx
import pytest
from pydantic import SecretStr

from accountability.config.settings import SourceConfig
from accountability.models.facts import (
    CommitteeFact,
    FinanceFact,
    IdeologyFact,
    RosterFact,
    TradeFact,
    TransactionType,
    VoteFact,
    VotePosition,
)
from accountability.models.politician import Chamber, IdScheme, Party

BASE_URL = "https://api.test"
API_KEY = "test-key-do-not-log"


@pytest.fixture
def source_config():
    """Factory for adapter configs: small pages, no rate limiting, a fake key."""

    def _make(**overrides) -> SourceConfig:
        values = {
            "base_url": BASE_URL,
            "api_key": SecretStr(API_KEY),
            "congress": 119,
            "page_size": 2,
            "timeout": 5.0,
            "rate_limit_delay": 0,
        }
        values.update(overrides)
        return SourceConfig(**values)

    return _make


@pytest.fixture
def mock_client():
    """Factory for an AsyncClient whose requests go to ``handler`` instead of the network."""

    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def roster_fact():
    """Factory for roster facts."""

    def _make(bioguide_id: str = "S000033", **overrides) -> RosterFact:
        values = {
            "legislator_id": bioguide_id,
            "first_name": "Bernard",
            "last_name": "Sanders",
            "full_name": "Bernard Sanders",
            "party": Party.INDEPENDENT,
            "state": "VT",
            "chamber": Chamber.SENATE,
        }
        values.update(overrides)
        return RosterFact(**values)

    return _make


@pytest.fixture
def vote_fact():
    """Factory for vote facts."""

    def _make(
        legislator_id: str = "S000033",
        roll_call_id: str = "119-senate-1",
        position: VotePosition = VotePosition.YEA,
        **overrides,
    ) -> VoteFact:
        return VoteFact(
            legislator_id=legislator_id,
            roll_call_id=roll_call_id,
            position=position,
            **overrides,
        )

    return _make


@pytest.fixture
def trade_fact():
    """Factory for trade facts."""

    def _make(
        legislator_id: str = "P000197",
        ticker: str = "AAPL",
        amount_usd: float = 1000.0,
        transaction: TransactionType = TransactionType.PURCHASE,
        **overrides,
    ) -> TradeFact:
        return TradeFact(
            legislator_id=legislator_id,
            ticker=ticker,
            amount_usd=amount_usd,
            transaction=transaction,
            **overrides,
        )

    return _make


@pytest.fixture
def ideology_fact():
    """Factory for ideology facts keyed by bioguide id with an ICPSR link."""

    def _make(
        legislator_id: str = "S000033",
        icpsr_id: str = "29147",
        id_scheme: IdScheme = IdScheme.BIOGUIDE,
        **overrides,
    ) -> IdeologyFact:
        values = {
            "legislator_id": legislator_id,
            "id_scheme": id_scheme,
            "icpsr_id": icpsr_id,
            "congress": 119,
            "chamber": "Senate",
            "party_code": 328,
            "party": Party.INDEPENDENT,
            "nominate_dim1": -0.539,
            "nominate_dim2": -0.305,
            "number_of_votes": 200,
            "number_of_errors": 10,
        }
        values.update(overrides)
        return IdeologyFact(**values)

    return _make


@pytest.fixture
def committee_fact():
    """Factory for committee facts."""

    def _make(legislator_id: str = "S000033", code: str = "SSBU", **overrides) -> CommitteeFact:
        values = {
            "legislator_id": legislator_id,
            "code": code,
            "name": "Committee on the Budget",
            "chamber": "senate",
        }
        values.update(overrides)
        return CommitteeFact(**values)

    return _make


@pytest.fixture
def finance_fact():
    """Factory for FEC finance facts."""

    def _make(legislator_id: str = "S000033", cycle: int = 2024, **overrides) -> FinanceFact:
        values = {
            "legislator_id": legislator_id,
            "candidate_id": "S4VT00033",
            "cycle": cycle,
            "receipts": 1000.0,
            "disbursements": 400.0,
            "cash_on_hand": 600.0,
        }
        values.update(overrides)
        return FinanceFact(**values)

    return _make
