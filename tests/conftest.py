"""
Shared fixtures for the leaderboard test suite.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

import pytest

from rewards.data_models.claims import AccountProfile, ClaimRecord

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def claim(account_id: str, status: str, claimed_at, items=()) -> ClaimRecord:
    """Build a claim record; ``items`` may be a count or a sequence of item names."""
    if isinstance(items, int):
        items = tuple(f"item-{n}" for n in range(items))
    return ClaimRecord(account_id=account_id, status=status, items_claimed=tuple(items), claimed_at=claimed_at)


def at(day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Timestamp in June 2025, UTC."""
    return datetime(2025, 6, day, hour, minute, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeDataSource:
    """In-memory claim data source that records how often it is queried."""

    def __init__(self, records: Iterable[ClaimRecord] = (), profiles: Iterable[AccountProfile] = ()):
        self.records: List[ClaimRecord] = list(records)
        self.profiles: List[AccountProfile] = list(profiles)
        self.record_fetches = 0
        self.profile_fetches = 0
        self.last_claimed_at_from: Optional[datetime] = None

    async def fetch_claim_records(self, account_id=None, claimed_at_from=None):
        self.record_fetches += 1
        self.last_claimed_at_from = claimed_at_from
        return [
            r for r in self.records
            if (account_id is None or r.account_id == account_id)
            and (claimed_at_from is None or r.claimed_at >= claimed_at_from)
        ]

    async def fetch_account_profiles(self, discord_id=None, account_id=None, account_ids=None):
        self.profile_fetches += 1
        wanted = set(account_ids) if account_ids is not None else None
        return [
            p for p in self.profiles
            if (discord_id is None or p.discord_id == discord_id)
            and (account_id is None or p.account_id == account_id)
            and (wanted is None or p.account_id in wanted)
        ]


@pytest.fixture
def fake_clock():
    return FakeClock()
