"""Fixed four-seat turn ring."""

from dataclasses import dataclass

from trickmatch.exceptions import ErrorCode, ValidationError
from trickmatch.models.enums import TeamKey
from trickmatch.models.team import Team


@dataclass(frozen=True)
class Seating:
    """Seat order for a match.

    The ring is team1.player1 -> team2.player1 -> team1.player2 ->
    team2.player2 and back. It is positional and never changes during a match;
    the winner of a round does not lead the next one.
    """

    team1: Team
    team2: Team

    @property
    def seats(self) -> tuple[str, str, str, str]:
        """All four identities in turn order."""
        return (self.team1.player1, self.team2.player1, self.team1.player2, self.team2.player2)

    def seat_index(self, player_id: str) -> int:
        """Get the ring position of a player.

        Raises:
            ValidationError: If the identity holds none of the four seats

        """
        try:
            return self.seats.index(player_id)
        except ValueError:
            raise ValidationError(
                f"Player {player_id!r} is not seated in this match", ErrorCode.UNKNOWN_PLAYER
            ) from None

    def next_player(self, current_player: str) -> str:
        """Get the identity that acts after current_player."""
        seats = self.seats
        return seats[(self.seat_index(current_player) + 1) % len(seats)]

    def first_player(self) -> str:
        """Get the identity that opens the match."""
        return self.team1.player1

    def team_of(self, player_id: str) -> TeamKey:
        """Map a seated identity to its team."""
        if self.team1.has_player(player_id):
            return TeamKey.TEAM1
        if self.team2.has_player(player_id):
            return TeamKey.TEAM2
        raise ValidationError(
            f"Player {player_id!r} is not seated in this match", ErrorCode.UNKNOWN_PLAYER
        )
