"""Tests for brewdesk.detect.cache module."""

from helpers import FakeClock

from brewdesk.detect import NOT_INSTALLED, DetectionCache, DetectionResult

GIT = DetectionResult(installed=True, version="2.43.0", source="command")


class TestDetectionCacheBasics:
    """Tests for get/set/delete/clear."""

    def test_get_returns_none_for_unknown_package(self) -> None:
        """Missing entries read as None."""
        cache = DetectionCache()

        assert cache.get("git") is None

    def test_get_returns_stored_result(self, clock: FakeClock) -> None:
        """A fresh entry is returned verbatim."""
        cache = DetectionCache(60, clock=clock)
        cache.set("git", GIT)

        assert cache.get("git") is GIT

    def test_negative_results_are_cached(self, clock: FakeClock) -> None:
        """NOT_INSTALLED is a cacheable value, distinct from a miss."""
        cache = DetectionCache(60, clock=clock)
        cache.set("git", NOT_INSTALLED)

        assert cache.get("git") == NOT_INSTALLED
        assert cache.has("git") is True

    def test_set_overwrites_and_resets_timestamp(self, clock: FakeClock) -> None:
        """Re-setting an entry restarts its TTL."""
        cache = DetectionCache(60, clock=clock)
        cache.set("git", NOT_INSTALLED)
        clock.advance(50)
        cache.set("git", GIT)
        clock.advance(50)

        assert cache.get("git") is GIT

    def test_delete_removes_entry(self, clock: FakeClock) -> None:
        """delete() invalidates one package only."""
        cache = DetectionCache(60, clock=clock)
        cache.set("git", GIT)
        cache.set("node@20", GIT)

        cache.delete("git")

        assert cache.get("git") is None
        assert cache.get("node@20") is GIT

    def test_delete_unknown_package_is_noop(self) -> None:
        """Deleting a missing entry does not raise."""
        cache = DetectionCache()

        cache.delete("missing")

        assert cache.size == 0

    def test_clear_removes_everything(self, clock: FakeClock) -> None:
        """clear() empties the cache."""
        cache = DetectionCache(60, clock=clock)
        cache.set("git", GIT)
        cache.set("docker", NOT_INSTALLED)

        cache.clear()

        assert cache.size == 0
        assert cache.has("git") is False


class TestDetectionCacheExpiry:
    """Tests for lazy TTL expiry."""

    def test_ttl_is_stored_in_milliseconds(self) -> None:
        """TTL seconds are converted to milliseconds."""
        assert DetectionCache(60).ttl_ms == 60_000
        assert DetectionCache(0.5).ttl_ms == 500

    def test_entry_alive_exactly_at_ttl(self, clock: FakeClock) -> None:
        """Expiry requires now - timestamp to exceed the TTL."""
        cache = DetectionCache(60, clock=clock)
        cache.set("git", GIT)
        clock.advance(60)

        assert cache.get("git") is GIT

    def test_entry_expires_after_ttl(self, clock: FakeClock) -> None:
        """Entries older than the TTL read as None."""
        cache = DetectionCache(60, clock=clock)
        cache.set("git", GIT)
        clock.advance(60.001)

        assert cache.get("git") is None

    def test_size_counts_stale_entries_until_read(self, clock: FakeClock) -> None:
        """Stale entries are not swept; only a read evicts them."""
        cache = DetectionCache(10, clock=clock)
        cache.set("git", GIT)
        cache.set("docker", GIT)
        clock.advance(11)

        assert cache.size == 2
        assert len(cache) == 2

        assert cache.get("git") is None
        assert cache.size == 1

    def test_has_evicts_expired_entry(self, clock: FakeClock) -> None:
        """has() goes through get() and therefore evicts."""
        cache = DetectionCache(10, clock=clock)
        cache.set("git", GIT)
        clock.advance(11)

        assert cache.has("git") is False
        assert cache.size == 0

    def test_zero_ttl_keeps_entry_until_clock_moves(self, clock: FakeClock) -> None:
        """With TTL 0 an entry is only valid at the instant it was set."""
        cache = DetectionCache(0, clock=clock)
        cache.set("git", GIT)

        assert cache.get("git") is GIT

        clock.advance(0.01)
        assert cache.get("git") is None
