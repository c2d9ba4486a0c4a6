"""Per-match mutual exclusion."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class MatchLocks:
    """Registry of asyncio locks keyed by match id.

    Submissions for one match queue behind each other; different matches
    never share a lock. A lock is dropped once nobody holds or awaits it, so
    the registry only grows with the number of matches being written to.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, match_id: str) -> AsyncIterator[None]:
        """Hold the lock of one match for the duration of the block."""
        # No await between lookup and registration, so this cannot race
        lock = self._locks.get(match_id)
        if lock is None:
            lock = self._locks[match_id] = asyncio.Lock()
        self._users[match_id] = self._users.get(match_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[match_id] -= 1
            if self._users[match_id] == 0:
                del self._users[match_id]
                del self._locks[match_id]

    def is_locked(self, match_id: str) -> bool:
        """Check if a match is currently inside its critical section."""
        lock = self._locks.get(match_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        """Number of matches with a live lock."""
        return len(self._locks)
