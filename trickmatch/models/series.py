"""Best-of-three series resolution."""

from collections.abc import Mapping

from trickmatch.constants import ROUNDS_TO_WIN
from trickmatch.models.enums import RoundKey, TeamKey


def count_wins(round_winners: Mapping[RoundKey, TeamKey]) -> dict[TeamKey, int]:
    """Count round wins per team."""
    wins = dict.fromkeys(TeamKey, 0)
    for winner in round_winners.values():
        wins[winner] += 1
    return wins


def evaluate_series(round_winners: Mapping[RoundKey, TeamKey]) -> TeamKey | None:
    """Decide the series from the rounds resolved so far.

    A team takes the series as soon as it holds two round wins, so a 2-0
    sweep ends the match after round2.

    Returns:
        The series winner, or None while undecided

    """
    for team, wins in count_wins(round_winners).items():
        if wins >= ROUNDS_TO_WIN:
            return team
    return None
