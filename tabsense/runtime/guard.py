"""
Concurrency guard: which tabs are mid-classification.

Per-tab state machine ``idle → processing → idle``. ``acquire`` is the only
way into processing and fails if the tab is already there; it hands back a
token naming that one cycle. ``release`` is the only way out and only clears
the entry when given the token of the cycle that holds it.

A tab removed while processing is *evicted*: it leaves the active set at once
(so removal sees a clean guard and a reopened tab can start a fresh cycle)
and the stale cycle's release reports False, which tells the controller the
cycle outlived its tab.
"""

from __future__ import annotations

import itertools

from tabsense.observability.logging import get_logger

logger = get_logger(__name__)


class ProcessingGuard:
    """Process-scoped map of tab id to the token of its running cycle."""

    def __init__(self) -> None:
        self._active: dict[int, int] = {}
        self._evicted: set[int] = set()
        self._tokens = itertools.count(1)

    def is_processing(self, tab_id: int) -> bool:
        return tab_id in self._active

    def acquire(self, tab_id: int) -> int | None:
        """Enter processing. Returns the cycle token, or None if the tab is busy."""
        if tab_id in self._active:
            return None
        token = next(self._tokens)
        self._active[tab_id] = token
        return token

    def release(self, tab_id: int, token: int) -> bool:
        """
        Leave processing for the cycle identified by ``token``.

        Returns:
            True if that cycle still held the tab, False if it was evicted
            (tab closed) while the cycle ran
        """
        if self._active.get(tab_id) == token:
            del self._active[tab_id]
            return True
        if token in self._evicted:
            self._evicted.remove(token)
            return False
        logger.warning("Release for tab %s with unknown token %s", tab_id, token)
        return False

    def evict(self, tab_id: int) -> None:
        """Drop a tab that was closed; its in-flight cycle is marked stale."""
        token = self._active.pop(tab_id, None)
        if token is not None:
            self._evicted.add(token)

    @property
    def active(self) -> frozenset[int]:
        return frozenset(self._active)

    def __len__(self) -> int:
        return len(self._active)
