"""
Shared constants for the reward claim leaderboard.

This module contains the fixed lookup tables and literal values used across
reconciliation, ranking and identity resolution.
"""

class ClaimStatus:
    """Status values written by the claiming process."""

    SUCCESS = "success"
    FAILED = "failed"

class TimeframeConstants:
    """Lookback window tokens accepted by the leaderboard."""

    # Token -> number of days, must stay in sync with the dashboard selector
    TIMEFRAME_DAYS = {
        '1d': 1,
        '7d': 7,
        '14d': 14,
        '28d': 28,
        '30d': 30,
        '90d': 90,
        '1y': 365,
    }

    DEFAULT_TIMEFRAME = '7d'
    DEFAULT_DAYS = 7

class IdentityConstants:
    """Constants for username and avatar resolution."""

    UNKNOWN_USERNAME = "Unknown"

    # Discord assigns one of five default avatars to users without a custom one
    DISCORD_DEFAULT_AVATAR_COUNT = 5

    # Literal strings that leak into avatar hash / id columns from JS clients
    NULLISH_STRINGS = ("null", "undefined")
