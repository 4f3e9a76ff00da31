"""Tests for normalization helpers."""

import pytest

from accountability.models.facts import TransactionType, VotePosition
from accountability.models.politician import Chamber, Party
from accountability.storage.normalization import (
    committee_chamber,
    committee_leadership,
    days_between,
    normalize_chamber,
    normalize_party,
    normalize_state,
    normalize_transaction,
    normalize_vote_position,
    parse_csv,
    parse_date,
    parse_number,
    round_half_up,
    split_csv_line,
    split_name,
)


class TestSplitCsvLine:
    """Tests for quote-aware CSV splitting."""

    def test_comma_inside_quotes_is_not_a_separator(self):
        """A quoted comma stays inside its field."""
        assert split_csv_line('"Smith, John",D,VT') == ["Smith, John", "D", "VT"]

    def test_escaped_quotes(self):
        """Doubled quotes inside a quoted field become one quote."""
        assert split_csv_line('"The ""Big"" Bill",Passed') == ['The "Big" Bill', "Passed"]

    def test_empty_fields_are_kept(self):
        """Consecutive commas produce empty fields."""
        assert split_csv_line("a,,c") == ["a", "", "c"]


class TestParseCsv:
    """Tests for parse_csv function."""

    def test_rows_keyed_by_header(self):
        """Quoted names survive and rows are keyed by column."""
        text = 'icpsr,bioname,state_abbrev\n29147,"SANDERS, Bernard",VT\n'
        assert parse_csv(text) == [
            {"icpsr": "29147", "bioname": "SANDERS, Bernard", "state_abbrev": "VT"}
        ]

    def test_skips_blank_lines_and_pads_short_rows(self):
        """Blank lines vanish; missing trailing columns become empty strings."""
        text = "a,b,c\n1,2,3\n\n4,5\n"
        assert parse_csv(text) == [
            {"a": "1", "b": "2", "c": "3"},
            {"a": "4", "b": "5", "c": ""},
        ]

    def test_empty_text(self):
        """Empty input parses to no rows."""
        assert parse_csv("") == []


class TestSplitName:
    """Tests for split_name function."""

    def test_last_comma_first(self):
        assert split_name("Sanders, Bernard") == ("Bernard", "Sanders")

    def test_only_first_given_name_kept(self):
        """Middle names are dropped."""
        assert split_name("Ocasio-Cortez, Alexandria Maria") == ("Alexandria", "Ocasio-Cortez")

    def test_name_without_comma(self):
        assert split_name("Mike Lee") == ("Mike", "Lee")

    def test_empty(self):
        assert split_name(None) == ("", "")


class TestNormalizeParty:
    """Tests for normalize_party function."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Democratic", Party.DEMOCRAT),
            ("Republican", Party.REPUBLICAN),
            ("Independent", Party.INDEPENDENT),
            ("Libertarian", Party.LIBERTARIAN),
            ("republican", Party.REPUBLICAN),
            ("R", Party.REPUBLICAN),
        ],
    )
    def test_known_parties(self, raw, expected):
        assert normalize_party(raw) == expected

    def test_unknown_party_falls_back_to_first_letter(self):
        """An unmapped name whose initial is a known code uses that code."""
        assert normalize_party("Democratic-Farmer-Labor") == Party.DEMOCRAT

    def test_unrecognized_party_is_other(self):
        assert normalize_party("Whig") == Party.OTHER
        assert normalize_party(None) == Party.OTHER


class TestNormalizeState:
    """Tests for normalize_state function."""

    def test_full_name_and_code(self):
        assert normalize_state("Vermont") == "VT"
        assert normalize_state("new york") == "NY"
        assert normalize_state("ut") == "UT"

    def test_territory(self):
        assert normalize_state("Puerto Rico") == "PR"

    def test_invalid(self):
        assert normalize_state("Atlantis") is None
        assert normalize_state("") is None


class TestNormalizeChamber:
    """Tests for normalize_chamber function."""

    def test_variants(self):
        assert normalize_chamber("Senate") == Chamber.SENATE
        assert normalize_chamber("House of Representatives") == Chamber.HOUSE
        assert normalize_chamber("H") == Chamber.HOUSE
        assert normalize_chamber("Joint") is None


class TestParseNumber:
    """Tests for parse_number function."""

    def test_currency_decoration_is_stripped(self):
        assert parse_number("$1,001") == 1001.0

    def test_blank_is_none(self):
        assert parse_number("") is None
        assert parse_number(None) is None

    def test_unparseable_raises(self):
        with pytest.raises(ValueError):
            parse_number("N/A")

    def test_non_finite_raises(self):
        with pytest.raises(ValueError):
            parse_number("nan")

    def test_int_cast(self):
        """Integer casts accept "12.0" but reject "12.5"."""
        assert parse_number("12.0", int) == 12
        with pytest.raises(ValueError):
            parse_number("12.5", int)


class TestRoundHalfUp:
    """Tests for round_half_up function."""

    def test_half_goes_up(self):
        """Unlike round(), ties go away from zero."""
        assert round_half_up(2.5) == 3.0
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(66.65, 1) == 66.7

    def test_plain_values(self):
        assert round_half_up(95.0, 1) == 95.0


class TestDates:
    """Tests for parse_date and days_between."""

    def test_parse_iso_variants(self):
        assert str(parse_date("2024-03-01")) == "2024-03-01"
        assert str(parse_date("2024-03-01T12:00:00Z")) == "2024-03-01"
        assert parse_date("March 1") is None

    def test_days_between(self):
        assert days_between("2024-01-01", "2024-03-01") == 60
        assert days_between("2024-01-01", None) is None

    def test_days_between_is_signed(self):
        """A filing before the trade is negative, not a delay."""
        assert days_between("2024-03-01", "2024-01-01") == -60


class TestVotesAndTrades:
    """Tests for vote position and transaction mapping."""

    def test_vote_positions(self):
        assert normalize_vote_position("Yes") == VotePosition.YEA
        assert normalize_vote_position("No") == VotePosition.NAY
        assert normalize_vote_position("Present") == VotePosition.PRESENT
        assert normalize_vote_position("Not Voting") == VotePosition.NOT_VOTING
        assert normalize_vote_position(None) == VotePosition.NOT_VOTING

    def test_transactions(self):
        assert normalize_transaction("Purchase") == TransactionType.PURCHASE
        assert normalize_transaction("Sale (Full)") == TransactionType.SALE
        assert normalize_transaction("Sale (Partial)") == TransactionType.SALE
        assert normalize_transaction("Exchange") == TransactionType.EXCHANGE


class TestCommittees:
    """Tests for committee code and title helpers."""

    def test_chamber_from_code_prefix(self):
        assert committee_chamber("HSAG") == "house"
        assert committee_chamber("SSFI") == "senate"
        assert committee_chamber("JSEC") == "joint"
        assert committee_chamber(None) == "joint"

    def test_leadership_from_title(self):
        assert committee_leadership("Chairman") == (True, False)
        assert committee_leadership("Ranking Member") == (False, True)
        assert committee_leadership("Member") == (False, False)
        assert committee_leadership(None) == (False, False)
