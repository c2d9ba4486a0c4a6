"""Round (trick) resolution."""

from collections.abc import Sequence

from trickmatch.constants import PLAYERS_PER_ROUND
from trickmatch.exceptions import InvariantViolation, ValidationError
from trickmatch.models.enums import TeamKey
from trickmatch.models.play import Play
from trickmatch.models.seating import Seating


def winning_play(plays: Sequence[Play]) -> Play:
    """Select the play with the highest card value.

    Ties go to the play seen first in the given order. Suit is ignored.
    """
    if not plays:
        raise InvariantViolation("Cannot pick a winner from zero plays")

    best = plays[0]
    for play in plays[1:]:
        # Strictly greater: an equal value never displaces an earlier play
        if play.card.value > best.card.value:
            best = play
    return best


def resolve_round(plays: Sequence[Play], seating: Seating) -> TeamKey:
    """Determine which team won a completed round.

    Args:
        plays: The four plays of one round, in the order they were recorded
        seating: Seating of the match the plays belong to

    Returns:
        The winning team

    Raises:
        InvariantViolation: If the round is not exactly four plays of one round,
            or the winner is not seated in the match

    """
    if len(plays) != PLAYERS_PER_ROUND:
        raise InvariantViolation(
            f"Round resolved with {len(plays)} plays, expected {PLAYERS_PER_ROUND}"
        )
    if len({play.round for play in plays}) != 1:
        raise InvariantViolation("Round resolved with plays from different rounds")

    winner = winning_play(plays)
    try:
        return seating.team_of(winner.player_id)
    except ValidationError as e:
        raise InvariantViolation(
            f"Round winner {winner.player_id!r} belongs to neither team"
        ) from e
