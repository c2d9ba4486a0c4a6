"""Base class for match stores."""

from abc import ABC, abstractmethod

from trickmatch.models.match import Match


class MatchStore(ABC):
    """Persistence collaborator used by the match service.

    Plays are part of the Match aggregate, so a single store doubles as the
    play store. Implementations raise StoreError on backend failures and
    ConcurrencyConflictError when a save loses a version race.
    """

    @abstractmethod
    async def insert(self, match: Match) -> None:
        """Persist a newly created match."""

    @abstractmethod
    async def load(self, match_id: str) -> Match | None:
        """Load a private copy of a match, or None if it does not exist."""

    @abstractmethod
    async def save(self, match: Match, expected_version: int) -> None:
        """Replace the stored match if its version still equals expected_version.

        Args:
            match: Match carrying the new state
            expected_version: Version the caller loaded before mutating

        """

    @abstractmethod
    async def find_active(self, limit: int) -> list[Match]:
        """Find matches that are not complete, most recently updated first."""
