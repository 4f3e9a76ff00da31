"""
Application-wide constants.

API endpoints, page sizes, code tables and other magic numbers live here.
"""
from datetime import datetime

# API Base URLs
CONGRESS_GOV_BASE_URL = "https://api.congress.gov/v3"
PROPUBLICA_BASE_URL = "https://api.propublica.org/congress/v1"
QUIVER_BASE_URL = "https://api.quiverquant.com/beta"
VOTEVIEW_BASE_URL = "https://voteview.com/static/data/out"
FEC_BASE_URL = "https://api.open.fec.gov/v1"

# Congress numbers - calculated dynamically
# Formula: Each Congress is 2 years, starting from 1st Congress in 1789
# Congress number = ((current_year - 1789) // 2) + 1
def _calculate_current_congress() -> int:
    """Calculate the current Congress number based on today's date."""
    current_year = datetime.now().year
    return ((current_year - 1789) // 2) + 1

CURRENT_CONGRESS = _calculate_current_congress()  # Auto-calculates (119 in 2025)


def election_cycle(congress: int) -> int:
    """FEC two-year cycle of the election that seated ``congress`` (119 -> 2024)."""
    return 1786 + 2 * congress


# Page sizes
CONGRESS_GOV_PAGE_SIZE = 250  # API maximum
PROPUBLICA_PAGE_SIZE = 20     # Fixed by the API, not configurable
QUIVER_PAGE_SIZE = 500

# Rate Limiting
RATE_LIMIT_DELAY = 0.5  # seconds between pages
HTTP_TIMEOUT = 30.0     # seconds per request

# Voteview chamber file prefixes
VOTEVIEW_CHAMBERS = {
    "house": "H",
    "senate": "S",
}

# Voteview party codes
VOTEVIEW_PARTY_CODES = {
    100: "D",
    200: "R",
    328: "I",
}

# Voteview cast codes (1-3 yea variants, 4-6 nay variants, 7-8 present, 9 absent)
VOTEVIEW_CAST_CODES = {
    1: "Yea", 2: "Yea", 3: "Yea",
    4: "Nay", 5: "Nay", 6: "Nay",
    7: "Present", 8: "Present",
    9: "Not Voting",
}

# Trades
TOP_TICKERS_LIMIT = 5
LATE_DISCLOSURE_DAYS = 45  # STOCK Act filing deadline

# Key vote categories, checked in order; first match wins
KEY_VOTE_CATEGORIES = [
    ("Healthcare", ["health", "medicare", "medicaid", "affordable care"]),
    ("Climate & Environment", ["climate", "environment", "emission", "clean energy", "paris agreement"]),
    ("Voting Rights", ["voting", "election", "ballot", "voter"]),
    ("Immigration", ["immigra", "border", "asylum", "daca", "dreamers"]),
    ("Economy & Taxes", ["tax", "budget", "appropriation", "spending", "deficit"]),
    ("Civil Rights", ["civil right", "discrimination", "equality", "lgbtq"]),
    ("National Security", ["defense", "military", "nato", "ukraine", "foreign aid"]),
    ("Government Ethics", ["ethic", "transparency", "oversight", "impeach"]),
]
OTHER_VOTE_CATEGORY = "Other"

# Output file names
ICPSR_TO_BIOGUIDE_FILE = "icpsr-to-bioguide.json"
BIOGUIDE_TO_ICPSR_FILE = "bioguide-to-icpsr.json"
LEGISLATORS_FILE = "legislators.json"
RUN_REPORT_FILE = "run-report.json"
