"""
Legislator identity models.

Defines the join key shared by every source and the enums for chamber and party.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class Chamber(str, Enum):
    """Legislative chamber."""
    SENATE = "senate"
    HOUSE = "house"


class Party(str, Enum):
    """Political party affiliation."""
    DEMOCRAT = "D"
    REPUBLICAN = "R"
    INDEPENDENT = "I"
    LIBERTARIAN = "L"
    GREEN = "G"
    OTHER = "O"


class IdScheme(str, Enum):
    """Which identifier system a key belongs to."""
    BIOGUIDE = "bioguide"  # canonical, alphanumeric (e.g. "S000033")
    ICPSR = "icpsr"        # alternate, numeric, used by Voteview


class LegislatorIdentity(BaseModel):
    """
    The canonical join key for one legislator.

    ``icpsr_id`` is absent until Voteview has scored the member.
    """
    bioguide_id: str = Field(..., min_length=1, description="Canonical id from Congress.gov")
    icpsr_id: Optional[str] = Field(None, description="Voteview/ICPSR id, if scored")
    chamber: Chamber
    state: Optional[str] = Field(None, min_length=2, max_length=2, description="Two-letter state code")
    district: Optional[int] = Field(None, description="House district number (None for Senators)")

    @model_validator(mode="after")
    def _senators_have_no_district(self) -> "LegislatorIdentity":
        if self.chamber == Chamber.SENATE and self.district is not None:
            raise ValueError("district is only valid for house members")
        return self

    def __str__(self) -> str:
        district_str = f"-{self.district}" if self.district is not None else ""
        return f"{self.bioguide_id} ({self.chamber.value}, {self.state}{district_str})"
