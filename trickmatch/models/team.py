"""Team model."""

from dataclasses import dataclass

from trickmatch.exceptions import ErrorCode, ValidationError


@dataclass(frozen=True)
class Team:
    """Two players sharing round wins.

    Identities are opaque strings compared exactly; no case or whitespace
    normalisation is applied.
    """

    player1: str
    player2: str

    @property
    def players(self) -> tuple[str, str]:
        """Both players in seat order."""
        return (self.player1, self.player2)

    def has_player(self, player_id: str) -> bool:
        """Check if a player belongs to this team."""
        return player_id in self.players


def validate_roster(team1: Team, team2: Team) -> None:
    """Ensure the four seats hold four distinct, non-empty identities.

    Raises:
        ValidationError: If an identity is empty or repeated

    """
    identities = [*team1.players, *team2.players]
    if any(not isinstance(p, str) or not p for p in identities):
        raise ValidationError("Player identities must be non-empty strings", ErrorCode.INVALID_ROSTER)
    if len(set(identities)) != len(identities):
        raise ValidationError("All four players must be distinct", ErrorCode.INVALID_ROSTER)
