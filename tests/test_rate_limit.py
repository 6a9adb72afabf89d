"""Tests for formguard.rate_limit: fixed-window counter store."""

import threading

import pytest

from formguard.rate_limit import RateLimitStore


class TestCheckAndConsume:
    def test_first_submission_allowed(self, store):
        decision = store.check_and_consume("1.2.3.4")
        assert decision.allowed is True
        assert decision.remaining == 2

    def test_remaining_counts_down(self, store):
        remaining = [store.check_and_consume("1.2.3.4").remaining for _ in range(3)]
        assert remaining == [2, 1, 0]

    def test_fourth_in_window_denied(self, store, clock):
        for _ in range(3):
            assert store.check_and_consume("1.2.3.4").allowed
        clock.advance(3599)
        decision = store.check_and_consume("1.2.3.4")
        assert decision.allowed is False
        assert decision.remaining == 0

    def test_denied_does_not_increment(self, store):
        for _ in range(5):
            store.check_and_consume("1.2.3.4")
        assert store.get("1.2.3.4").count == 3

    def test_window_expiry_resets_counter(self, store, clock):
        for _ in range(4):
            store.check_and_consume("1.2.3.4")
        clock.advance(3600)
        decision = store.check_and_consume("1.2.3.4")
        assert decision.allowed is True
        assert decision.remaining == 2
        assert store.get("1.2.3.4").count == 1

    def test_reset_at_is_window_after_first_hit(self, store, clock):
        store.check_and_consume("1.2.3.4")
        start = clock.now
        clock.advance(100)
        store.check_and_consume("1.2.3.4")
        assert store.get("1.2.3.4").reset_at == start + 3600

    def test_keys_are_independent(self, store):
        for _ in range(3):
            store.check_and_consume("a")
        assert store.check_and_consume("b").allowed is True
        assert store.check_and_consume("a").allowed is False

    def test_explicit_now_overrides_clock(self, store):
        for _ in range(3):
            store.check_and_consume("a", now=0.0)
        assert store.check_and_consume("a", now=10.0).allowed is False
        assert store.check_and_consume("a", now=3600.0).allowed is True

    def test_boundary_burst_admits_twice_limit(self, store, clock):
        """Fixed windows: a burst across the boundary gets 2x the limit."""
        for _ in range(3):
            assert store.check_and_consume("a").allowed
        clock.advance(3600)
        for _ in range(3):
            assert store.check_and_consume("a").allowed

    def test_invalid_limits(self):
        with pytest.raises(ValueError):
            RateLimitStore(limit=0)
        with pytest.raises(ValueError):
            RateLimitStore(window_seconds=0)


class TestRelease:
    def test_release_returns_slot(self, store):
        for _ in range(3):
            store.check_and_consume("a")
        store.release("a")
        assert store.check_and_consume("a").allowed is True

    def test_release_last_slot_drops_entry(self, store):
        store.check_and_consume("a")
        store.release("a")
        assert store.get("a") is None

    def test_release_after_expiry_is_noop(self, store, clock):
        store.check_and_consume("a")
        store.check_and_consume("a")
        clock.advance(3600)
        store.release("a")
        assert store.get("a").count == 2

    def test_release_unknown_key(self, store):
        store.release("nobody")
        assert len(store) == 0


class TestSweep:
    def test_sweep_removes_only_expired(self, store, clock):
        store.check_and_consume("old")
        clock.advance(1800)
        store.check_and_consume("new")
        clock.advance(1800)
        removed = store.sweep()
        assert removed == 1
        assert store.get("old") is None
        assert store.get("new") is not None

    def test_sweep_empty(self, store):
        assert store.sweep() == 0

    def test_clear(self, store):
        store.check_and_consume("a")
        store.clear()
        assert len(store) == 0


class TestConcurrency:
    def test_parallel_requests_never_exceed_limit(self):
        store = RateLimitStore(limit=3, window_seconds=3600)
        barrier = threading.Barrier(32)
        results = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            decision = store.check_and_consume("same-client")
            with lock:
                results.append(decision.allowed)

        threads = [threading.Thread(target=worker) for _ in range(32)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 3
        assert store.get("same-client").count == 3
