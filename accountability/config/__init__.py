"""Config module - settings and constants."""

from accountability.config.settings import settings, Settings, SourceConfig
from accountability.config.constants import (
    CONGRESS_GOV_BASE_URL,
    CURRENT_CONGRESS,
    FEC_BASE_URL,
    PROPUBLICA_BASE_URL,
    QUIVER_BASE_URL,
    VOTEVIEW_BASE_URL,
)

__all__ = [
    "settings",
    "Settings",
    "SourceConfig",
    "CONGRESS_GOV_BASE_URL",
    "CURRENT_CONGRESS",
    "FEC_BASE_URL",
    "PROPUBLICA_BASE_URL",
    "QUIVER_BASE_URL",
    "VOTEVIEW_BASE_URL",
]
