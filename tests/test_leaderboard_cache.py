"""
Tests for the leaderboard result cache: TTL expiry, FIFO bound and invalidation.
"""

import logging
import threading

from conftest import FakeClock

from rewards.services.leaderboard_cache import LeaderboardResultCache


def make_cache(clock, ttl=30, max_entries=10):
    return LeaderboardResultCache(ttl=ttl, max_entries=max_entries, clock=clock)


def test_hit_within_ttl_and_miss_after(fake_clock):
    cache = make_cache(fake_clock)
    cache.set(("7d", 50), "payload")

    fake_clock.advance(29)
    assert cache.get(("7d", 50)) == "payload"

    fake_clock.advance(1)
    assert cache.get(("7d", 50)) is None
    assert ("7d", 50) not in cache


def test_missing_key_is_a_miss(fake_clock):
    assert make_cache(fake_clock).get(("1d", 10)) is None


def test_evicts_oldest_inserted_not_least_recently_used(fake_clock):
    cache = make_cache(fake_clock, max_entries=3)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    # Reading "a" must not protect it
    assert cache.get("a") == 1
    cache.set("d", 4)

    assert "a" not in cache
    assert [cache.get(k) for k in ("b", "c", "d")] == [2, 3, 4]


def test_bound_of_ten_entries():
    clock = FakeClock()
    cache = LeaderboardResultCache(clock=clock)
    for limit in range(1, 16):
        cache.set(("7d", limit), limit)

    assert len(cache) == 10
    assert cache.get(("7d", 5)) is None
    assert cache.get(("7d", 6)) == 6
    assert cache.get(("7d", 15)) == 15


def test_reset_existing_key_keeps_insertion_position(fake_clock):
    cache = make_cache(fake_clock, max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    cache.set("c", 3)

    assert "a" not in cache
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_reset_refreshes_timestamp(fake_clock):
    cache = make_cache(fake_clock)
    cache.set("a", 1)
    fake_clock.advance(20)
    cache.set("a", 2)
    fake_clock.advance(20)

    assert cache.get("a") == 2


def test_clear_drops_everything(fake_clock):
    cache = make_cache(fake_clock)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.clear()

    assert len(cache) == 0
    assert cache.get("a") is None


def test_concurrent_writers_respect_bound(fake_clock):
    cache = make_cache(fake_clock, max_entries=10)

    def writer(offset):
        for n in range(200):
            cache.set((offset, n), n)
            cache.get((offset, n - 1))

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 10


def test_importing_cache_installs_no_log_handlers():
    assert logging.getLogger("rewards.services.leaderboard_cache").handlers == []
