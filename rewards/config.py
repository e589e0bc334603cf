import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Leaderboard core configuration settings"""

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///rewards.db')

    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

    # Calendar-day bucketing for the same-day dedup rule
    REFERENCE_TIMEZONE = os.getenv('REFERENCE_TIMEZONE', 'UTC')

    # Leaderboard result cache
    LEADERBOARD_CACHE_TTL = float(os.getenv('LEADERBOARD_CACHE_TTL', 30))  # seconds
    LEADERBOARD_CACHE_MAX_ENTRIES = int(os.getenv('LEADERBOARD_CACHE_MAX_ENTRIES', 10))

    # Upstream claim/profile fetch
    FETCH_TIMEOUT_SECONDS = float(os.getenv('FETCH_TIMEOUT_SECONDS', 15))
    DEFAULT_LEADERBOARD_LIMIT = int(os.getenv('DEFAULT_LEADERBOARD_LIMIT', 50))

    # Avatar sources
    AVATAR_PATH_PREFIX = os.getenv('AVATAR_PATH_PREFIX', '/avatars')
    DISCORD_CDN_URL = os.getenv('DISCORD_CDN_URL', 'https://cdn.discordapp.com')

    @classmethod
    def validate(cls):
        """Validate that configuration values are usable"""
        import pytz

        if cls.LEADERBOARD_CACHE_TTL <= 0:
            raise ValueError("LEADERBOARD_CACHE_TTL must be positive")
        if cls.LEADERBOARD_CACHE_MAX_ENTRIES < 1:
            raise ValueError("LEADERBOARD_CACHE_MAX_ENTRIES must be at least 1")
        if cls.FETCH_TIMEOUT_SECONDS <= 0:
            raise ValueError("FETCH_TIMEOUT_SECONDS must be positive")
        if cls.DEFAULT_LEADERBOARD_LIMIT < 1:
            raise ValueError("DEFAULT_LEADERBOARD_LIMIT must be at least 1")
        try:
            pytz.timezone(cls.REFERENCE_TIMEZONE)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"REFERENCE_TIMEZONE '{cls.REFERENCE_TIMEZONE}' is not a known timezone")
