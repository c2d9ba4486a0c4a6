"""In-process match store."""

import copy
import logging
from typing import Any

from trickmatch.exceptions import ConcurrencyConflictError, StoreError
from trickmatch.models.match import Match
from trickmatch.repositories.base import MatchStore
from trickmatch.services.match_serializer import deserialize_match, serialize_match

logger = logging.getLogger(__name__)


class MemoryMatchRepository(MatchStore):
    """Match store backed by a dict of serialized documents.

    Documents are copied on the way in and rebuilt on the way out, so a loaded
    match is a private working copy: mutating it changes nothing until save().
    Owned by the application lifespan, not shared process-wide.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._documents: dict[str, dict[str, Any]] = {}

    async def insert(self, match: Match) -> None:
        """Persist a newly created match."""
        if match.id in self._documents:
            raise StoreError(f"Match {match.id} already exists")
        self._documents[match.id] = serialize_match(match)
        logger.debug("Match %s inserted in memory store", match.id)

    async def load(self, match_id: str) -> Match | None:
        """Load a private copy of a match."""
        document = self._documents.get(match_id)
        if document is None:
            return None
        return deserialize_match(copy.deepcopy(document))

    async def save(self, match: Match, expected_version: int) -> None:
        """Replace the stored match if nobody committed since it was loaded."""
        current = self._documents.get(match.id)
        if current is None:
            raise StoreError(f"Match {match.id} does not exist")
        if current.get("version", 0) != expected_version:
            raise ConcurrencyConflictError(match.id, expected_version)
        self._documents[match.id] = serialize_match(match)
        logger.debug("Match %s saved in memory store (version %d)", match.id, match.version)

    async def find_active(self, limit: int) -> list[Match]:
        """Find incomplete matches, most recently updated first."""
        active = [doc for doc in self._documents.values() if not doc.get("is_complete", False)]
        active.sort(key=lambda doc: doc.get("updated_at") or "", reverse=True)
        return [deserialize_match(copy.deepcopy(doc)) for doc in active[:limit]]
