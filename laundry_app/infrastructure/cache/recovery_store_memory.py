"""In-memory recovery session store with per-entry expiry. Single process only."""

import heapq
import time
from typing import Callable, Dict, List, Optional, Tuple

from laundry_app.application.recovery_flow import RecoverySnapshot


class InMemoryRecoverySessionStore:
    """
    Implements RecoverySessionStore. Expired entries are dropped on read, and
    every save evicts whatever has expired so abandoned flows do not accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: Dict[str, Tuple[float, RecoverySnapshot]] = {}
        # (expires_at, recovery_id); stale pairs left by re-saves are skipped on eviction.
        self._expiry_heap: List[Tuple[float, str]] = []
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    async def save(self, snapshot: RecoverySnapshot, ttl_seconds: int) -> None:
        now = self._clock()
        self._evict_expired(now)
        expires_at = now + ttl_seconds
        self._entries[snapshot.recovery_id] = (expires_at, snapshot)
        heapq.heappush(self._expiry_heap, (expires_at, snapshot.recovery_id))

    async def get(self, recovery_id: str) -> Optional[RecoverySnapshot]:
        entry = self._entries.get(recovery_id)
        if entry is None:
            return None
        expires_at, snapshot = entry
        if self._clock() >= expires_at:
            del self._entries[recovery_id]
            return None
        return snapshot

    async def delete(self, recovery_id: str) -> None:
        self._entries.pop(recovery_id, None)

    def _evict_expired(self, now: float) -> None:
        while self._expiry_heap and self._expiry_heap[0][0] <= now:
            expires_at, recovery_id = heapq.heappop(self._expiry_heap)
            entry = self._entries.get(recovery_id)
            if entry is not None and entry[0] == expires_at:
                del self._entries[recovery_id]
