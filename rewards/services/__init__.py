"""
Services package for the reward claim leaderboard.
"""

from .base import BaseService
from .leaderboard import ClaimDataSource, LeaderboardService
from .leaderboard_cache import LeaderboardResultCache

__all__ = ['BaseService', 'ClaimDataSource', 'LeaderboardService', 'LeaderboardResultCache']
