"""Match aggregate and its single gameplay transition."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from trickmatch.constants import PLAYERS_PER_ROUND
from trickmatch.exceptions import InvariantViolation, MatchCompleteError, TurnError, ValidationError
from trickmatch.models.card import Card
from trickmatch.models.enums import RoundKey, TeamKey
from trickmatch.models.play import Play, now_ms
from trickmatch.models.seating import Seating
from trickmatch.models.series import evaluate_series
from trickmatch.models.team import Team, validate_roster
from trickmatch.models.trick import resolve_round


@dataclass
class Match:
    """A best-of-three match between two teams of two.

    Attributes:
        id: Unique match identifier
        team1: First team (holds seats 1 and 3)
        team2: Second team (holds seats 2 and 4)
        current_turn: Player whose play is currently accepted
        current_round: Round currently accepting plays
        round_winners: Winner of each resolved round
        game_winner: Series winner once decided
        is_complete: True once the series is decided
        plays: Every recorded play, in commit order
        version: Number of committed transitions, used for compare-and-swap saves
        created_at: ISO timestamp when the match was created
        updated_at: ISO timestamp of the last committed transition

    """

    id: str
    team1: Team
    team2: Team
    current_turn: str
    current_round: RoundKey = RoundKey.ROUND1
    round_winners: dict[RoundKey, TeamKey] = field(default_factory=dict)
    game_winner: TeamKey | None = None
    is_complete: bool = False
    plays: list[Play] = field(default_factory=list)
    version: int = 0
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def create(cls, team1: Team, team2: Team, match_id: str | None = None) -> "Match":
        """Start a new match with team1.player1 to act in round1."""
        validate_roster(team1, team2)
        timestamp = datetime.now(UTC).isoformat()
        seating = Seating(team1, team2)
        return cls(
            id=match_id or str(uuid.uuid4()),
            team1=team1,
            team2=team2,
            current_turn=seating.first_player(),
            created_at=timestamp,
            updated_at=timestamp,
        )

    @property
    def seating(self) -> Seating:
        """Turn ring for this match."""
        return Seating(self.team1, self.team2)

    def get_round_plays(self, round_key: RoundKey) -> list[Play]:
        """Get the plays of one round in commit order."""
        return [play for play in self.plays if play.round == round_key]

    def has_player_played(self, player_id: str, round_key: RoundKey) -> bool:
        """Check if a player already has a play in a round."""
        return any(play.player_id == player_id for play in self.get_round_plays(round_key))

    def apply_play(self, player_id: str, card: Card, timestamp: int | None = None) -> Play:
        """Record a play and advance turn, round and series state.

        This mutates the match in place; callers that need rejection to be
        side-effect free must apply it to a private copy.

        Args:
            player_id: Player submitting the card
            card: The validated card
            timestamp: Epoch milliseconds, defaults to now

        Returns:
            The recorded play

        Raises:
            MatchCompleteError: If the series is decided
            ValidationError: If card is not a Card
            TurnError: If it is someone else's turn

        """
        if self.is_complete:
            raise MatchCompleteError(self.id)
        if not isinstance(card, Card):
            raise ValidationError(f"Expected a Card, got {type(card).__name__}")
        if player_id != self.current_turn:
            raise TurnError(player_id, self.current_turn)

        round_key = self.current_round
        if self.has_player_played(player_id, round_key):
            raise InvariantViolation(f"{player_id} already played in {round_key.value}")

        play = Play(
            match_id=self.id,
            player_id=player_id,
            round=round_key,
            card=card,
            timestamp=timestamp if timestamp is not None else now_ms(),
        )
        self.plays.append(play)

        # The ring keeps turning even when this play closes the round
        self.current_turn = self.seating.next_player(player_id)

        round_plays = self.get_round_plays(round_key)
        if len(round_plays) == PLAYERS_PER_ROUND:
            self._close_round(round_key, round_plays)

        self.version += 1
        self.updated_at = datetime.now(UTC).isoformat()
        return play

    def _close_round(self, round_key: RoundKey, round_plays: list[Play]) -> None:
        """Resolve a full round and, if it settles the series, end the match."""
        if round_key in self.round_winners:
            raise InvariantViolation(f"{round_key.value} was already resolved")

        self.round_winners[round_key] = resolve_round(round_plays, self.seating)

        next_round = round_key.next()
        if next_round is not None:
            self.current_round = next_round

        series_winner = evaluate_series(self.round_winners)
        if series_winner is not None:
            self.game_winner = series_winner
            self.is_complete = True
        elif next_round is None:
            raise InvariantViolation("Final round closed without deciding the series")

    def __str__(self) -> str:
        """Return string representation."""
        status = f"won by {self.game_winner.value}" if self.game_winner else "in progress"
        return (
            f"Match {self.id}: {self.current_round.value}, "
            f"turn {self.current_turn}, {len(self.plays)} plays, {status}"
        )
