"""Tests for record merging and derived statistics."""

import random

from accountability.models.facts import TransactionType, VotePosition
from accountability.models.politician import Chamber, IdScheme
from accountability.reconciliation import (
    IdentityMap,
    RecordMerger,
    compute_finance_stats,
    compute_trade_stats,
    compute_vote_stats,
)


class TestComputeTradeStats:
    """Tests for compute_trade_stats function."""

    def test_totals_and_top_ticker(self, trade_fact):
        """Purchases 3000, sales 500, AAPL traded twice."""
        trades = [
            trade_fact(ticker="AAPL", amount_usd=1000, transaction=TransactionType.PURCHASE),
            trade_fact(ticker="AAPL", amount_usd=500, transaction=TransactionType.SALE),
            trade_fact(ticker="MSFT", amount_usd=2000, transaction=TransactionType.PURCHASE),
        ]

        stats = compute_trade_stats(trades)

        assert stats.total_trades == 3
        assert stats.purchases == 2
        assert stats.sales == 1
        assert stats.total_purchase_value == 3000
        assert stats.total_sale_value == 500
        assert stats.top_tickers[0].ticker == "AAPL"
        assert stats.top_tickers[0].count == 2

    def test_ties_keep_first_encountered_order(self, trade_fact):
        trades = [trade_fact(ticker=t) for t in ["TSLA", "NVDA", "NVDA", "AMD", "TSLA", "GOOG", "META", "F"]]

        stats = compute_trade_stats(trades)

        assert [(t.ticker, t.count) for t in stats.top_tickers] == [
            ("TSLA", 2), ("NVDA", 2), ("AMD", 1), ("GOOG", 1), ("META", 1),
        ]

    def test_currency_totals_round_to_whole_units(self, trade_fact):
        trades = [
            trade_fact(amount_usd=1000.25),
            trade_fact(amount_usd=0.25),
        ]

        assert compute_trade_stats(trades).total_purchase_value == 1001

    def test_average_excess_return_two_decimals(self, trade_fact):
        trades = [
            trade_fact(excess_return=1.005),
            trade_fact(excess_return=2.0),
            trade_fact(excess_return=None),
        ]

        assert compute_trade_stats(trades).avg_excess_return == 1.5

    def test_disclosure_delay(self, trade_fact):
        trades = [
            trade_fact(traded_date="2024-01-01", filed_date="2024-01-31"),
            trade_fact(traded_date="2024-01-01", filed_date="2024-03-01"),
            trade_fact(traded_date=None, filed_date="2024-03-01"),
        ]

        stats = compute_trade_stats(trades)

        assert stats.avg_days_to_disclosure == 45
        assert stats.late_disclosures == 1

    def test_filing_before_trade_is_not_a_delay(self, trade_fact):
        trades = [
            trade_fact(traded_date="2024-03-01", filed_date="2024-01-01"),
            trade_fact(traded_date="2024-01-01", filed_date="2024-01-11"),
        ]

        stats = compute_trade_stats(trades)

        assert stats.avg_days_to_disclosure == 10
        assert stats.late_disclosures == 0

    def test_no_trades_is_unknown_not_zero(self):
        stats = compute_trade_stats([])

        assert stats.total_trades == 0
        assert stats.avg_excess_return is None
        assert stats.avg_days_to_disclosure is None
        assert stats.top_tickers == []


class TestComputeVoteStats:
    """Tests for compute_vote_stats function."""

    def test_missed_vote_percentage(self, vote_fact):
        votes = [
            vote_fact(roll_call_id="1", position=VotePosition.YEA),
            vote_fact(roll_call_id="2", position=VotePosition.NOT_VOTING),
            vote_fact(roll_call_id="3", position=VotePosition.NAY),
        ]

        stats = compute_vote_stats(votes, [])

        assert stats.total_votes == 3
        assert stats.missed_votes == 1
        assert stats.missed_vote_pct == 33.3
        assert stats.party_loyalty_pct is None

    def test_loyalty_from_ideology_counts(self, ideology_fact):
        stats = compute_vote_stats([], [ideology_fact(number_of_votes=200, number_of_errors=10)])

        assert stats.party_loyalty_pct == 95.0
        assert stats.nominate_dim1 == -0.539
        assert stats.missed_vote_pct is None

    def test_loyalty_rounds_half_up(self, ideology_fact):
        """(3 - 1) / 3 = 66.666... -> 66.7"""
        stats = compute_vote_stats([], [ideology_fact(number_of_votes=3, number_of_errors=1)])

        assert stats.party_loyalty_pct == 66.7

    def test_no_scored_votes_is_unknown(self, ideology_fact):
        stats = compute_vote_stats([], [ideology_fact(number_of_votes=0, number_of_errors=0)])

        assert stats.party_loyalty_pct is None


class TestComputeFinanceStats:
    """Tests for compute_finance_stats function."""

    def test_latest_cycle_whole_dollars(self, finance_fact):
        finance = [
            finance_fact(cycle=2022, receipts=50.0),
            finance_fact(cycle=2024, receipts=1000.5, disbursements=0.49, cash_on_hand=10.0),
            finance_fact(cycle=2024, candidate_id="P80000722", receipts=1.0, cash_on_hand=0.0),
        ]

        stats = compute_finance_stats(finance)

        assert stats.cycle == 2024
        assert stats.receipts == 1002
        assert stats.disbursements == 400
        assert stats.cash_on_hand == 10

    def test_no_finance_is_unknown(self):
        assert compute_finance_stats([]) is None


class TestRecordMerger:
    """Tests for RecordMerger.merge."""

    def test_roster_seeds_records_sorted_by_id(self, roster_fact):
        facts = [roster_fact("W000001"), roster_fact("A000001")]

        result = RecordMerger().merge(facts)

        assert [r.bioguide_id for r in result.records] == ["A000001", "W000001"]
        assert result.merged == {"roster": 2}

    def test_facts_attach_in_arrival_order(self, roster_fact, vote_fact, trade_fact):
        facts = [
            vote_fact("S000033", roll_call_id="2"),
            roster_fact("S000033"),
            vote_fact("S000033", roll_call_id="1"),
            trade_fact("S000033"),
        ]

        record = RecordMerger().merge(facts).records[0]

        assert [v.roll_call_id for v in record.votes] == ["2", "1"]
        assert len(record.trades) == 1

    def test_orphans_are_dropped_and_counted(self, roster_fact, vote_fact, trade_fact):
        """Facts with no roster seed never materialize a record."""
        facts = [
            roster_fact("S000033"),
            vote_fact("X000001"),
            vote_fact("10713", id_scheme=IdScheme.ICPSR),
            trade_fact("X000001"),
        ]

        result = RecordMerger().merge(facts)

        assert [r.bioguide_id for r in result.records] == ["S000033"]
        assert result.records[0].votes == []
        assert result.orphaned == {"trades": 1, "votes": 2}

    def test_duplicate_submission_does_not_crash(self, roster_fact, vote_fact):
        """Duplicate facts accumulate; a second roster fact is only counted."""
        vote = vote_fact("S000033")
        facts = [
            roster_fact("S000033"),
            roster_fact("S000033", first_name="Bernie"),
            vote,
            vote,
        ]

        result = RecordMerger().merge(facts)

        record = result.records[0]
        assert record.first_name == "Bernard"
        assert len(record.votes) == 2
        assert result.duplicate_rosters == 1

    def test_icpsr_id_filled_from_identity_map(self, roster_fact):
        identities = IdentityMap()
        identities.register("S000033", "29147")

        record = RecordMerger().merge([roster_fact("S000033")], identities).records[0]

        assert record.icpsr_id == "29147"

    def test_house_record_identity(self, roster_fact):
        fact = roster_fact("O000172", chamber=Chamber.HOUSE, state="NY", district=14)

        record = RecordMerger().merge([fact]).records[0]

        assert record.chamber == Chamber.HOUSE
        assert record.district == 14
        assert str(record) == "Rep. Bernard Sanders (I-NY) (District 14)"

    def test_output_independent_of_arrival_order(self, roster_fact, vote_fact, trade_fact, ideology_fact):
        """Shuffling fact kinds relative to each other gives the same records."""
        rosters = [roster_fact("A000001"), roster_fact("B000002")]
        votes = [vote_fact("A000001", roll_call_id=str(i)) for i in range(3)]
        trades = [trade_fact("B000002", ticker=t) for t in ["AAPL", "MSFT"]]
        ideology = [ideology_fact("A000001")]

        groups = [rosters, votes, trades, ideology]
        baseline = RecordMerger().merge([f for g in groups for f in g])

        shuffled = list(groups)
        random.Random(7).shuffle(shuffled)
        result = RecordMerger().merge([f for g in reversed(shuffled) for f in g])

        assert [r.model_dump() for r in result.records] == [r.model_dump() for r in baseline.records]

    def test_committees_and_finance_attach(self, roster_fact, committee_fact, finance_fact):
        facts = [
            roster_fact("S000033"),
            committee_fact("S000033", code="SSBU"),
            committee_fact("S000033", code="SSHR"),
            finance_fact("S000033"),
            committee_fact("X000001"),
        ]

        result = RecordMerger().merge(facts)

        record = result.records[0]
        assert [c.code for c in record.committees] == ["SSBU", "SSHR"]
        assert record.finance_stats.receipts == 1000
        assert result.merged == {"committees": 2, "finance": 1, "roster": 1}
        assert result.orphaned == {"committees": 1}

    def test_tallies_per_source_label(self, roster_fact, vote_fact):
        """Two vote sources feeding one kind keep separate counts."""
        facts = [
            roster_fact("S000033", source="roster"),
            vote_fact("S000033", source="votes:house"),
            vote_fact("X000001", source="votes:house"),
            vote_fact("S000033", roll_call_id="2", source="votes:senate"),
            vote_fact("S000033", roll_call_id="3"),
        ]

        result = RecordMerger().merge(facts)

        assert result.merged == {"roster": 1, "votes": 3}
        assert result.merged_by_source == {"roster": 1, "votes:house": 1, "votes:senate": 1}
        assert result.orphaned_by_source == {"votes:house": 1}
