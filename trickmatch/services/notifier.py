"""Change notification interface."""

from abc import ABC, abstractmethod

from trickmatch.models.enums import Command
from trickmatch.services.projection import MatchProjection


class ChangeNotifier(ABC):
    """Receives the projection of every committed match change.

    Notification runs after the commit; an exception here is logged by the
    caller and never undoes the change.
    """

    @abstractmethod
    async def notify(self, command: Command, match_id: str, projection: MatchProjection) -> None:
        """Deliver a committed change to interested listeners."""
