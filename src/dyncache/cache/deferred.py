"""
Deferred write buffer.

Items queued with ``save_deferred`` wait here until ``commit``. A flush
walks a snapshot of the buffer in insertion order and drops each entry as
soon as its save succeeds, so a failed entry stays queued for the next
flush and successful ones are never written twice.
"""

from __future__ import annotations

from threading import RLock
from typing import Callable

from dyncache.cache.item import CacheItem
from dyncache.logging import get_logger
from dyncache.types import generate_id

logger = get_logger(__name__)


class DeferredWriteBuffer:
    """Insertion-ordered slot -> item mapping."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheItem] = {}
        self._lock = RLock()

    def append(self, item: CacheItem) -> str:
        """Queue an item and return its slot id."""
        slot = generate_id("slot")
        with self._lock:
            self._entries[slot] = item
        return slot

    def items(self) -> list[tuple[str, CacheItem]]:
        """Ordered snapshot of (slot, item) pairs."""
        with self._lock:
            return list(self._entries.items())

    def flush(self, save: Callable[[CacheItem], bool]) -> bool:
        """Save every queued item in order, keeping the failures.

        Args:
            save: Persists one item and reports success.

        Returns:
            True if every entry of this pass was saved (or there were none).
        """
        with self._lock:
            pending = list(self._entries.items())
            if not pending:
                return True

            failed = 0
            for slot, item in pending:
                if save(item):
                    del self._entries[slot]
                else:
                    failed += 1

            if failed:
                logger.warning(
                    "Deferred commit incomplete, failed items stay queued",
                    failed=failed,
                    attempted=len(pending),
                )
            else:
                logger.debug("Deferred commit complete", saved=len(pending))
            return failed == 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __bool__(self) -> bool:
        return len(self) > 0
