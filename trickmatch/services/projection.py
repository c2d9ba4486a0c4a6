"""Read-only views of match state.

Everything here is derived from stored Match fields. Round and series winners
are read from the aggregate, never recomputed from the plays.
"""

from pydantic import BaseModel, Field

from trickmatch.models.enums import RoundKey, Suit, TeamKey
from trickmatch.models.match import Match
from trickmatch.models.play import Play
from trickmatch.models.team import Team


class TeamView(BaseModel):
    """Team roster."""

    player1: str
    player2: str


class CardView(BaseModel):
    """Card as shown to clients."""

    value: int
    suit: Suit


class PlayView(BaseModel):
    """A recorded play."""

    id: str
    player_id: str
    timestamp: int
    card: CardView


class RoundWinners(BaseModel):
    """Winner per round, None until the round closes."""

    round1: TeamKey | None = None
    round2: TeamKey | None = None
    round3: TeamKey | None = None


class MatchSummary(BaseModel):
    """Public summary of a match."""

    match_id: str
    current_round: RoundKey
    current_turn: str | None
    round_winners: RoundWinners
    game_winner: TeamKey | None = None
    is_complete: bool = False


class MatchProjection(BaseModel):
    """Full public view of a match."""

    match_id: str
    team1: TeamView
    team2: TeamView
    summary: MatchSummary
    rounds: dict[RoundKey, list[PlayView]] = Field(default_factory=dict)


class PlaysView(BaseModel):
    """Plays of a match grouped by round."""

    match_id: str
    plays: dict[RoundKey, list[PlayView]]


def _team_view(team: Team) -> TeamView:
    return TeamView(player1=team.player1, player2=team.player2)


def play_view(play: Play) -> PlayView:
    """Render one play."""
    return PlayView(
        id=play.id,
        player_id=play.player_id,
        timestamp=play.timestamp,
        card=CardView(value=play.card.value, suit=play.card.suit),
    )


def group_plays(match: Match) -> dict[RoundKey, list[PlayView]]:
    """List the plays of every round, each round in commit order."""
    return {
        round_key: [play_view(p) for p in match.get_round_plays(round_key)]
        for round_key in RoundKey
    }


def summarize_match(match: Match) -> MatchSummary:
    """Build the public summary.

    current_turn is reported as None once the match is complete, since no
    further play is accepted from anyone.
    """
    return MatchSummary(
        match_id=match.id,
        current_round=match.current_round,
        current_turn=None if match.is_complete else match.current_turn,
        round_winners=RoundWinners(
            **{round_key.value: team for round_key, team in match.round_winners.items()}
        ),
        game_winner=match.game_winner,
        is_complete=match.is_complete,
    )


def project_match(match: Match) -> MatchProjection:
    """Build the full public view of a match."""
    return MatchProjection(
        match_id=match.id,
        team1=_team_view(match.team1),
        team2=_team_view(match.team2),
        summary=summarize_match(match),
        rounds=group_plays(match),
    )


def project_plays(match: Match) -> PlaysView:
    """Build the per-round play listing of a match."""
    return PlaysView(match_id=match.id, plays=group_plays(match))
