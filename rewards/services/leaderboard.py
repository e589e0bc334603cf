"""
Leaderboard service for reward claim activity.

Composes fetch, reconciliation, ranking and identity resolution into the
responses served to the dashboard, with a short-lived result cache in front.
Upstream failures degrade to empty results instead of propagating.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Protocol, TypeVar

from rewards.config import Config
from rewards.data_models.claims import AccountProfile, ClaimRecord
from rewards.data_models.leaderboard import (
    AccountRanking, IdentityResolution, LeaderboardResponse, LeaderboardStats
)
from rewards.services.leaderboard_cache import LeaderboardResultCache
from rewards.utils.identity import IdentityResolver
from rewards.utils.leaderboard_exceptions import (
    AccountNotRankedError, DataSourceError, FetchTimeoutError
)
from rewards.utils.ranking import RankingEngine, calculate_success_rate
from rewards.utils.reconciliation import ReconciliationEngine
from rewards.utils.timeframe import format_period, get_days_from_timeframe, get_window_start

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ClaimDataSource(Protocol):
    """Upstream store of claim records and registrations."""

    async def fetch_claim_records(
        self,
        account_id: Optional[str] = None,
        claimed_at_from: Optional[datetime] = None
    ) -> List[ClaimRecord]:
        ...

    async def fetch_account_profiles(
        self,
        discord_id: Optional[str] = None,
        account_id: Optional[str] = None,
        account_ids: Optional[Iterable[str]] = None
    ) -> List[AccountProfile]:
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LeaderboardService:
    """Service for claim leaderboards and per-account rankings with caching."""

    def __init__(
        self,
        data_source: ClaimDataSource,
        cache: Optional[LeaderboardResultCache] = None,
        identity_resolver: Optional[IdentityResolver] = None,
        reconciliation_engine: Optional[ReconciliationEngine] = None,
        fetch_timeout: Optional[float] = None,
        now: Callable[[], datetime] = _utc_now
    ):
        self.data_source = data_source
        # Empty caches are falsy (__len__), so injections are checked against None
        self.cache = cache if cache is not None else LeaderboardResultCache()
        self.identity_resolver = identity_resolver if identity_resolver is not None else IdentityResolver()
        self.reconciliation_engine = (
            reconciliation_engine if reconciliation_engine is not None else ReconciliationEngine()
        )
        self.ranking_engine = RankingEngine(self.identity_resolver)
        self.fetch_timeout = fetch_timeout if fetch_timeout is not None else Config.FETCH_TIMEOUT_SECONDS
        self._now = now

    def _start_deadline(self) -> float:
        """Loop time by which every fetch of one operation must finish."""
        return asyncio.get_running_loop().time() + self.fetch_timeout

    async def _fetch(self, awaitable: Awaitable[T], operation: str, deadline: Optional[float] = None) -> T:
        """
        Await an upstream fetch before the operation's deadline. No retries.

        All fetches of one operation share a single deadline, so an operation
        never waits longer than the fetch timeout in total.
        """
        if deadline is None:
            deadline = self._start_deadline()
        remaining = max(deadline - asyncio.get_running_loop().time(), 0)
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError:
            raise FetchTimeoutError(operation, self.fetch_timeout)
        except DataSourceError:
            raise
        except Exception as e:
            raise DataSourceError(operation, str(e)) from e

    async def _fetch_window_records(
        self,
        days: int,
        deadline: float,
        account_id: Optional[str] = None
    ) -> List[ClaimRecord]:
        window_start = get_window_start(days, self._now())
        return await self._fetch(
            self.data_source.fetch_claim_records(account_id=account_id, claimed_at_from=window_start),
            "claim records fetch",
            deadline
        )

    async def _fetch_profiles(self, account_ids: List[str], deadline: float) -> Dict[str, AccountProfile]:
        profiles = await self._fetch(
            self.data_source.fetch_account_profiles(account_ids=account_ids),
            "account profiles fetch",
            deadline
        )
        by_account: Dict[str, AccountProfile] = {}
        for profile in profiles:
            # First registration wins if an account is linked more than once
            by_account.setdefault(profile.account_id, profile)
        return by_account

    @staticmethod
    def _empty_response(timeframe: str, days: int) -> LeaderboardResponse:
        return LeaderboardResponse(
            timeframe=timeframe,
            period=format_period(days),
            total_users=0,
            total_successful_claims=0,
            total_failed_claims=0,
            entries=()
        )

    async def compute_leaderboard(self, timeframe: str = "7d", limit: Optional[int] = None) -> LeaderboardResponse:
        """
        Get the ranked leaderboard for a timeframe.

        Served from cache when a response for (timeframe, limit) is still fresh.
        On fetch failure or timeout a zeroed response is returned and nothing is
        cached.
        """
        if limit is None:
            limit = Config.DEFAULT_LEADERBOARD_LIMIT
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError("limit must be a positive integer")

        cache_key = (timeframe, limit)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        days = get_days_from_timeframe(timeframe)
        deadline = self._start_deadline()
        try:
            records = await self._fetch_window_records(days, deadline)
            aggregates = self.reconciliation_engine.reconcile_all(records)
            top = self.ranking_engine.sort_aggregates(aggregates)[:limit]
            profiles = await self._fetch_profiles([aggregate.account_id for aggregate in top], deadline)
        except DataSourceError as e:
            logger.error(f"Failed to compute leaderboard for timeframe {timeframe}: {e}", exc_info=True)
            return self._empty_response(timeframe, days)

        summary = self.ranking_engine.summarize(records)
        response = LeaderboardResponse(
            timeframe=timeframe,
            period=format_period(days),
            total_users=summary.total_users,
            total_successful_claims=summary.total_successful_claims,
            total_failed_claims=summary.total_failed_claims,
            entries=tuple(self.ranking_engine.rank_entries(top, profiles))
        )

        self.cache.set(cache_key, response)
        logger.debug(f"Computed leaderboard for {timeframe}: {len(response.entries)} entries, {summary.total_users} users")
        return response

    async def compute_account_ranking(self, account_id: str, timeframe: str = "7d") -> Optional[AccountRanking]:
        """
        Get one account's rank and reconciled totals.

        Returns None when upstream data is unavailable.

        Raises:
            AccountNotRankedError: The account has no claims in the window
        """
        days = get_days_from_timeframe(timeframe)
        deadline = self._start_deadline()
        try:
            records = await self._fetch_window_records(days, deadline)
            aggregates = self.reconciliation_engine.reconcile_all(records)
            aggregate = next((a for a in aggregates if a.account_id == account_id), None)
            if aggregate is None:
                raise AccountNotRankedError(account_id, timeframe)
            profiles = await self._fetch_profiles([account_id], deadline)
        except AccountNotRankedError:
            raise
        except DataSourceError as e:
            logger.error(f"Failed to compute ranking for account {account_id}: {e}", exc_info=True)
            return None

        aggregate = self.reconciliation_engine.verify_aggregate(aggregate)
        identity = self.identity_resolver.resolve(profiles.get(account_id))
        return AccountRanking(
            rank=self.ranking_engine.rank_of(account_id, aggregates),
            aggregate=aggregate,
            display_username=identity.display_username,
            avatar_url=identity.avatar_url,
            success_rate=calculate_success_rate(aggregate.successful_claims, aggregate.total_claims),
            timeframe=timeframe,
            period=format_period(days)
        )

    async def compute_leaderboard_stats(self, timeframe: str = "7d") -> LeaderboardStats:
        """
        Get raw claim statistics for a timeframe.

        Like the leaderboard summary, these counts do not apply the same-day
        dedup rule.
        """
        days = get_days_from_timeframe(timeframe)
        try:
            records = await self._fetch_window_records(days, self._start_deadline())
        except DataSourceError as e:
            logger.error(f"Failed to compute leaderboard stats for timeframe {timeframe}: {e}", exc_info=True)
            records = []

        summary = self.ranking_engine.summarize(records)
        total_claims = len(records)
        return LeaderboardStats(
            timeframe=timeframe,
            period=format_period(days),
            total_claims=total_claims,
            successful_claims=summary.total_successful_claims,
            total_items_claimed=sum(len(r.items_claimed) for r in records if r.is_success),
            unique_users=summary.total_users,
            success_rate=calculate_success_rate(summary.total_successful_claims, total_claims)
        )

    async def resolve_identity(self, account_id: str, session_username: Optional[str] = None) -> IdentityResolution:
        """Resolve one account's display identity; falls back to "Unknown" if the profile is unavailable."""
        try:
            profiles = await self._fetch(
                self.data_source.fetch_account_profiles(account_id=account_id),
                "account profile fetch"
            )
        except DataSourceError as e:
            logger.error(f"Failed to fetch profile for account {account_id}: {e}", exc_info=True)
            profiles = []

        return self.identity_resolver.resolve(profiles[0] if profiles else None, session_username)

    def invalidate_cache(self):
        """Clears cached leaderboards. Call after claim or registration data changes."""
        self.cache.clear()
