"""
Tests for the SQLAlchemy claim data source against a temporary SQLite database.
"""

from datetime import datetime, timedelta, timezone

import pytest

from rewards.database.claim_operations import ClaimOperations
from rewards.database.database import Database
from rewards.database.models import ClaimRecord, Registration
from rewards.services.leaderboard import LeaderboardService
from rewards.services.leaderboard_cache import LeaderboardResultCache
from rewards.utils.reconciliation import ReconciliationEngine

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
RUN = datetime(2025, 6, 15, 0, 0)


def stored(days_ago: float, hour: int = 12) -> datetime:
    """Naive UTC timestamp as written by the claiming process."""
    return (NOW - timedelta(days=days_ago)).replace(hour=hour, tzinfo=None)


@pytest.fixture
async def db(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'rewards_test.db'}")
    await database.initialize()

    async with database.transaction() as session:
        session.add_all([
            ClaimRecord(eight_ball_pool_id="111", website_user_id="u1", status="success",
                        items_claimed=["coins", "cue"], claimed_at=stored(1, 9), scheduler_run=RUN),
            ClaimRecord(eight_ball_pool_id="111", website_user_id="u1", status="failed",
                        items_claimed=[], claimed_at=stored(1, 15), scheduler_run=RUN, error="timeout"),
            ClaimRecord(eight_ball_pool_id="222", website_user_id="u2", status="failed",
                        items_claimed=[], claimed_at=stored(2), scheduler_run=RUN),
            ClaimRecord(eight_ball_pool_id="222", website_user_id="u2", status="success",
                        items_claimed=["spins"], claimed_at=stored(40), scheduler_run=RUN),
        ])
        session.add_all([
            Registration(eight_ball_pool_id="111", username="alpha", discord_id="555",
                         use_discord_avatar=True, discord_avatar_hash="hash111"),
            Registration(eight_ball_pool_id="222", username="bravo", discord_id="777",
                         profile_image_url="https://img.example/b.png", account_level=300,
                         account_rank="Master"),
        ])

    yield database
    await database.close()


async def test_fetch_records_filters_by_window(db):
    operations = ClaimOperations(db.session_factory)

    records = await operations.fetch_claim_records(claimed_at_from=NOW - timedelta(days=7))

    assert len(records) == 3
    # newest first
    assert [r.claimed_at for r in records] == sorted((r.claimed_at for r in records), reverse=True)
    assert {r.account_id for r in records} == {"111", "222"}


async def test_fetch_records_filters_by_account(db):
    operations = ClaimOperations(db.session_factory)

    records = await operations.fetch_claim_records(account_id="222")

    assert len(records) == 2
    assert all(r.account_id == "222" for r in records)


async def test_records_are_immutable_snapshots(db):
    records = await ClaimOperations(db.session_factory).fetch_claim_records(account_id="111")
    success = next(r for r in records if r.is_success)

    assert success.items_claimed == ("coins", "cue")
    with pytest.raises(AttributeError):
        success.status = "failed"


async def test_fetch_profiles_by_filter(db):
    operations = ClaimOperations(db.session_factory)

    by_account = await operations.fetch_account_profiles(account_id="222")
    by_discord = await operations.fetch_account_profiles(discord_id="555")
    batch = await operations.fetch_account_profiles(account_ids=["111", "222", "999"])
    everyone = await operations.fetch_account_profiles()

    assert [p.username for p in by_account] == ["bravo"]
    assert by_account[0].account_level == 300
    assert [p.account_id for p in by_discord] == ["111"]
    assert {p.account_id for p in batch} == {"111", "222"}
    assert len(everyone) == 2
    assert await operations.fetch_account_profiles(account_ids=[]) == []


async def test_leaderboard_end_to_end(db):
    service = LeaderboardService(
        ClaimOperations(db.session_factory),
        cache=LeaderboardResultCache(),
        reconciliation_engine=ReconciliationEngine("UTC"),
        now=lambda: NOW
    )

    response = await service.compute_leaderboard("7d", 50)

    assert [e.account_id for e in response.entries] == ["111", "222"]
    alpha, bravo = response.entries
    assert (alpha.successful_claims, alpha.failed_claims, alpha.total_items_claimed) == (1, 0, 2)
    assert alpha.avatar_url == "https://cdn.discordapp.com/avatars/555/hash111.png"
    assert (bravo.successful_claims, bravo.failed_claims, bravo.success_rate) == (0, 1, 0)
    assert bravo.avatar_url == "https://img.example/b.png"
    assert bravo.account_rank == "Master"
    assert response.total_failed_claims == 2
    assert response.total_users == 2
