"""
Data Normalization Module

Centralized functions to transform raw upstream values into our standardized
format. All source adapters should use these functions to ensure consistency.

Usage:
    from accountability.storage.normalization import normalize_state, normalize_party

    state = normalize_state("Vermont")   # "VT"
    party = normalize_party("Democratic")  # Party.DEMOCRAT
"""
import csv
import io
import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple, Union

from accountability.models.facts import TransactionType, VotePosition
from accountability.models.politician import Chamber, Party

logger = logging.getLogger(__name__)


# ============================================================================
# State Normalization
# ============================================================================

STATE_NAME_TO_CODE = {
    "Alabama": "AL", "Alaska": "AK", "Arizona": "AZ", "Arkansas": "AR",
    "California": "CA", "Colorado": "CO", "Connecticut": "CT", "Delaware": "DE",
    "Florida": "FL", "Georgia": "GA", "Hawaii": "HI", "Idaho": "ID",
    "Illinois": "IL", "Indiana": "IN", "Iowa": "IA", "Kansas": "KS",
    "Kentucky": "KY", "Louisiana": "LA", "Maine": "ME", "Maryland": "MD",
    "Massachusetts": "MA", "Michigan": "MI", "Minnesota": "MN", "Mississippi": "MS",
    "Missouri": "MO", "Montana": "MT", "Nebraska": "NE", "Nevada": "NV",
    "New Hampshire": "NH", "New Jersey": "NJ", "New Mexico": "NM", "New York": "NY",
    "North Carolina": "NC", "North Dakota": "ND", "Ohio": "OH", "Oklahoma": "OK",
    "Oregon": "OR", "Pennsylvania": "PA", "Rhode Island": "RI", "South Carolina": "SC",
    "South Dakota": "SD", "Tennessee": "TN", "Texas": "TX", "Utah": "UT",
    "Vermont": "VT", "Virginia": "VA", "Washington": "WA", "West Virginia": "WV",
    "Wisconsin": "WI", "Wyoming": "WY",
    # Territories with delegates
    "District of Columbia": "DC", "Puerto Rico": "PR", "American Samoa": "AS",
    "Guam": "GU", "Northern Mariana Islands": "MP", "Virgin Islands": "VI",
}

# Reverse mapping for validation
STATE_CODE_TO_NAME = {v: k for k, v in STATE_NAME_TO_CODE.items()}


def normalize_state(state: Optional[str]) -> Optional[str]:
    """
    Normalize state to 2-letter code.

    Args:
        state: State name or code (e.g., "Vermont", "VT", "vt")

    Returns:
        2-letter uppercase state code (e.g., "VT") or None if invalid

    Examples:
        >>> normalize_state("Vermont")
        'VT'
        >>> normalize_state("vt")
        'VT'
    """
    if not state:
        return None

    state_clean = state.strip()

    # Already a 2-letter code?
    if len(state_clean) == 2:
        code = state_clean.upper()
        return code if code in STATE_CODE_TO_NAME else None

    if state_clean in STATE_NAME_TO_CODE:
        return STATE_NAME_TO_CODE[state_clean]

    for full_name, code in STATE_NAME_TO_CODE.items():
        if full_name.lower() == state_clean.lower():
            return code

    return None


# ============================================================================
# Party Normalization
# ============================================================================

PARTY_MAPPINGS = {
    "Democratic": Party.DEMOCRAT,
    "Democrat": Party.DEMOCRAT,
    "Republican": Party.REPUBLICAN,
    "Independent": Party.INDEPENDENT,
    "Independent Democrat": Party.INDEPENDENT,
    "Libertarian": Party.LIBERTARIAN,
    "Green": Party.GREEN,
}


def normalize_party(party: Optional[str]) -> Party:
    """
    Normalize party affiliation to a single-letter code.

    Verbose names map through PARTY_MAPPINGS; anything else falls back to
    its first letter when that is a known code, else Party.OTHER.

    Examples:
        >>> normalize_party("Democratic")
        <Party.DEMOCRAT: 'D'>
        >>> normalize_party("R")
        <Party.REPUBLICAN: 'R'>
    """
    if not party:
        return Party.OTHER

    party_clean = party.strip()

    if party_clean in PARTY_MAPPINGS:
        return PARTY_MAPPINGS[party_clean]

    for key, code in PARTY_MAPPINGS.items():
        if key.lower() == party_clean.lower():
            return code

    initial = party_clean[:1].upper()
    try:
        return Party(initial)
    except ValueError:
        logger.warning(f"Unexpected party value '{party_clean}', using '{Party.OTHER.value}'")
        return Party.OTHER


# ============================================================================
# Chamber Normalization
# ============================================================================

def normalize_chamber(chamber: Optional[str]) -> Optional[Chamber]:
    """
    Normalize chamber names ("Senate", "House of Representatives", "H", ...).

    Returns:
        Chamber or None if unrecognized
    """
    if not chamber:
        return None

    chamber_clean = chamber.strip().lower()
    if chamber_clean in ("senate", "s"):
        return Chamber.SENATE
    if chamber_clean in ("house", "house of representatives", "h"):
        return Chamber.HOUSE
    return None


# ============================================================================
# Names
# ============================================================================

def split_name(raw_name: Optional[str]) -> Tuple[str, str]:
    """
    Split a "Last, First Middle" name into (first, last).

    Only the first word after the comma is kept as the first name. Names
    without a comma are treated as "First ... Last".

    Examples:
        >>> split_name("Sanders, Bernard")
        ('Bernard', 'Sanders')
        >>> split_name("Ocasio-Cortez, Alexandria Maria")
        ('Alexandria', 'Ocasio-Cortez')
    """
    if not raw_name:
        return "", ""

    if "," in raw_name:
        last, _, rest = raw_name.partition(",")
        given = rest.split()
        return (given[0] if given else ""), last.strip()

    parts = raw_name.split()
    first = parts[0] if parts else ""
    last = parts[-1] if len(parts) > 1 else ""
    return first, last


# ============================================================================
# Numbers
# ============================================================================

Number = Union[int, float]


def parse_number(value, cast=float) -> Optional[Number]:
    """
    Coerce a numeric-as-string value.

    Returns None for missing/blank values. Currency decoration ("$1,001")
    is stripped first.

    Raises:
        ValueError: If the value is present but not a number
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, (int, float)):
        return cast(value)

    text = str(value).strip().replace("$", "").replace(",", "")
    if not text:
        return None

    try:
        number = float(text)
    except ValueError:
        raise ValueError(f"Not a number: {value!r}") from None

    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError(f"Not a finite number: {value!r}")

    if cast is int:
        if not number.is_integer():
            raise ValueError(f"Not an integer: {value!r}")
        return int(number)
    return cast(number)


def round_half_up(value: float, places: int = 0) -> float:
    """
    Round like a person would: 0.5 goes up, not to the nearest even digit.

    Examples:
        >>> round_half_up(2.25, 1)
        2.3
        >>> round_half_up(2.5)
        3.0
    """
    try:
        quantum = Decimal(1).scaleb(-places)
        return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise ValueError(f"Cannot round {value!r}") from None


# ============================================================================
# Dates
# ============================================================================

def parse_date(date_str: Optional[str]) -> Optional[date]:
    """Parse an ISO date or datetime string to a date; None if unparseable."""
    if not date_str:
        return None
    try:
        if "T" in date_str:
            return datetime.fromisoformat(date_str.replace("Z", "+00:00")).date()
        return date.fromisoformat(date_str[:10])
    except ValueError:
        return None


def days_between(start: Optional[str], end: Optional[str]) -> Optional[int]:
    """
    Whole days from ``start`` to ``end``; None if either date is missing.

    Negative when ``end`` precedes ``start``.
    """
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        return None
    return (end_date - start_date).days


# ============================================================================
# Votes and Trades
# ============================================================================

VOTE_POSITION_MAPPINGS = {
    "yea": VotePosition.YEA,
    "yes": VotePosition.YEA,
    "aye": VotePosition.YEA,
    "nay": VotePosition.NAY,
    "no": VotePosition.NAY,
    "present": VotePosition.PRESENT,
    "not voting": VotePosition.NOT_VOTING,
}


def normalize_vote_position(position: Optional[str]) -> VotePosition:
    """Map "Yes"/"Aye"/"No"/... to a VotePosition; unknown means not voting."""
    if not position:
        return VotePosition.NOT_VOTING
    return VOTE_POSITION_MAPPINGS.get(position.strip().lower(), VotePosition.NOT_VOTING)


def normalize_transaction(transaction: Optional[str]) -> TransactionType:
    """
    Map trade directions to TransactionType.

    Examples:
        >>> normalize_transaction("Sale (Partial)")
        <TransactionType.SALE: 'Sale'>
    """
    text = (transaction or "").strip().lower()
    if text.startswith("purchase"):
        return TransactionType.PURCHASE
    if text.startswith("sale"):
        return TransactionType.SALE
    return TransactionType.EXCHANGE


# ============================================================================
# Committees
# ============================================================================

COMMITTEE_CHAMBER_PREFIXES = {
    "H": "house",
    "S": "senate",
    "J": "joint",
}


def committee_chamber(code: Optional[str]) -> str:
    """
    Chamber of a committee from its code prefix; unknown prefixes are joint.

    Examples:
        >>> committee_chamber("SSFI")
        'senate'
        >>> committee_chamber("HSAG")
        'house'
    """
    prefix = (code or "")[:1].upper()
    return COMMITTEE_CHAMBER_PREFIXES.get(prefix, "joint")


def committee_leadership(title: Optional[str]) -> Tuple[bool, bool]:
    """
    Read leadership from a committee title.

    Returns:
        (is_chair, is_ranking_member); "Ranking Member" is never a chair
    """
    text = (title or "").lower()
    is_ranking = "ranking" in text
    return "chair" in text and not is_ranking, is_ranking


# ============================================================================
# CSV
# ============================================================================

def split_csv_line(line: str) -> List[str]:
    """
    Split one CSV line, honoring quotes.

    Commas inside double quotes are part of the field, and fields are
    stripped of surrounding whitespace.

    Examples:
        >>> split_csv_line('"Smith, John",D,VT')
        ['Smith, John', 'D', 'VT']
    """
    fields = next(csv.reader([line], skipinitialspace=True), [])
    return [f.strip() for f in fields]


def parse_csv(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text with a header row into dicts keyed by column name.

    Blank lines are skipped; short rows get empty strings for missing columns.
    """
    reader = csv.reader(io.StringIO(text.strip()), skipinitialspace=True)
    header = next(reader, None)
    if not header:
        return []

    columns = [h.strip() for h in header]
    rows = []
    for values in reader:
        if not any(v.strip() for v in values):
            continue
        values = [v.strip() for v in values]
        values += [""] * (len(columns) - len(values))
        rows.append(dict(zip(columns, values)))
    return rows
