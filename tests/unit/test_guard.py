"""Tests for the per-tab processing guard."""

from tabsense.runtime.guard import ProcessingGuard


def test_acquire_release_cycle():
    guard = ProcessingGuard()

    token = guard.acquire(1)
    assert token is not None
    assert guard.is_processing(1)
    assert guard.release(1, token)
    assert not guard.is_processing(1)
    assert len(guard) == 0


def test_second_acquire_fails_while_processing():
    guard = ProcessingGuard()
    guard.acquire(1)

    assert guard.acquire(1) is None
    assert guard.acquire(2) is not None
    assert guard.active == frozenset({1, 2})


def test_tokens_are_unique_per_cycle():
    guard = ProcessingGuard()
    first = guard.acquire(1)
    guard.release(1, first)

    assert guard.acquire(1) != first


def test_evicted_tab_leaves_active_set_and_release_reports_stale():
    guard = ProcessingGuard()
    token = guard.acquire(5)

    guard.evict(5)

    assert not guard.is_processing(5)
    assert guard.release(5, token) is False
    # A fresh cycle after the stale release behaves normally
    fresh = guard.acquire(5)
    assert guard.release(5, fresh) is True


def test_stale_release_does_not_free_newer_cycle():
    """Cycle A evicted, cycle B started on the same id, then A finishes."""
    guard = ProcessingGuard()
    cycle_a = guard.acquire(5)
    guard.evict(5)
    cycle_b = guard.acquire(5)

    assert guard.release(5, cycle_a) is False
    assert guard.is_processing(5)
    assert guard.acquire(5) is None

    assert guard.release(5, cycle_b) is True
    assert not guard.is_processing(5)


def test_evict_idle_tab_is_noop():
    guard = ProcessingGuard()
    guard.evict(3)
    token = guard.acquire(3)
    assert guard.release(3, token) is True


def test_unmatched_release():
    guard = ProcessingGuard()
    assert guard.release(99, 12345) is False

    token = guard.acquire(1)
    assert guard.release(1, token + 1000) is False
    assert guard.is_processing(1)
