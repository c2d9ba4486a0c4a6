"""Tests for the Match aggregate and its play transition."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from trickmatch.exceptions import (
    ErrorCode,
    InvariantViolation,
    MatchCompleteError,
    TurnError,
    ValidationError,
)
from trickmatch.models.card import Card
from trickmatch.models.enums import RoundKey, Suit, TeamKey
from trickmatch.models.match import Match
from trickmatch.models.play import Play
from trickmatch.models.series import evaluate_series
from trickmatch.models.team import Team

RING = ("A", "C", "B", "D")


@pytest.fixture
def match():
    """Fresh match with team1={A,B}, team2={C,D}."""
    return Match.create(Team("A", "B"), Team("C", "D"), match_id="m1")


def play_round(match, values, suit=Suit.HEARTS):
    """Play one card per seat in ring order."""
    for player, value in zip(RING, values, strict=True):
        match.apply_play(player, Card(value=value, suit=suit))


class TestMatchCreate:
    """Test match creation."""

    def test_initial_state(self, match):
        """A new match waits for team1.player1 in round1."""
        assert match.current_turn == "A"
        assert match.current_round == RoundKey.ROUND1
        assert match.round_winners == {}
        assert match.game_winner is None
        assert not match.is_complete
        assert match.plays == []
        assert match.version == 0
        assert match.created_at is not None

    def test_generated_id(self):
        """Ids are generated when not given."""
        first = Match.create(Team("A", "B"), Team("C", "D"))
        second = Match.create(Team("A", "B"), Team("C", "D"))
        assert first.id
        assert first.id != second.id

    def test_invalid_roster(self):
        """A player cannot sit on both teams."""
        with pytest.raises(ValidationError) as exc_info:
            Match.create(Team("A", "B"), Team("C", "A"))
        assert exc_info.value.code == ErrorCode.INVALID_ROSTER


class TestApplyPlay:
    """Test a single transition."""

    def test_first_play(self, match):
        """The play is recorded and the turn passes to team2.player1."""
        play = match.apply_play("A", Card(value=10, suit=Suit.SPADES), timestamp=1234)
        assert isinstance(play, Play)
        assert play.round == RoundKey.ROUND1
        assert play.timestamp == 1234
        assert play.match_id == "m1"
        assert match.plays == [play]
        assert match.current_turn == "C"
        assert match.version == 1

    def test_play_ids_are_unique(self, match):
        """Every play gets its own id."""
        play_round(match, [1, 2, 3, 4])
        assert len({p.id for p in match.plays}) == 4

    def test_out_of_turn(self, match):
        """Scenario D: B cannot open round1."""
        with pytest.raises(TurnError) as exc_info:
            match.apply_play("B", Card(value=5, suit=Suit.HEARTS))
        assert exc_info.value.code == ErrorCode.NOT_YOUR_TURN
        assert match.plays == []
        assert match.current_turn == "A"
        assert match.version == 0

    def test_unseated_player(self, match):
        """A stranger is simply not the current turn."""
        with pytest.raises(TurnError):
            match.apply_play("Z", Card(value=5, suit=Suit.HEARTS))

    def test_player_cannot_play_twice_in_a_row(self, match):
        """After A plays the turn has moved on."""
        match.apply_play("A", Card(value=5, suit=Suit.HEARTS))
        with pytest.raises(TurnError):
            match.apply_play("A", Card(value=6, suit=Suit.HEARTS))
        assert len(match.plays) == 1

    def test_card_is_checked_before_turn(self, match):
        """A malformed card from the wrong player is a card error."""
        with pytest.raises(ValidationError):
            match.apply_play("B", {"value": 5, "suit": "hearts"})

    def test_duplicate_play_in_round_is_an_invariant_violation(self, match):
        """Corrupted turn state is reported, not silently accepted."""
        match.apply_play("A", Card(value=5, suit=Suit.HEARTS))
        match.current_turn = "A"
        with pytest.raises(InvariantViolation):
            match.apply_play("A", Card(value=6, suit=Suit.HEARTS))

    def test_str(self, match):
        """String form shows progress."""
        assert "round1" in str(match)
        assert "in progress" in str(match)


class TestRoundLifecycle:
    """Test rounds closing and the series ending."""

    def test_single_round(self, match):
        """Scenario A: A's 10 wins round1 for team1."""
        match.apply_play("A", Card(value=10, suit=Suit.SPADES))
        match.apply_play("C", Card(value=3, suit=Suit.HEARTS))
        match.apply_play("B", Card(value=7, suit=Suit.DIAMONDS))
        match.apply_play("D", Card(value=2, suit=Suit.CLUBS))

        assert match.round_winners == {RoundKey.ROUND1: TeamKey.TEAM1}
        assert match.current_round == RoundKey.ROUND2
        assert match.current_turn == "A"
        assert not match.is_complete

    def test_round_not_resolved_early(self, match):
        """Three plays leave the round open."""
        for player, value in zip(RING[:3], [13, 12, 11], strict=True):
            match.apply_play(player, Card(value=value, suit=Suit.HEARTS))
        assert match.round_winners == {}
        assert match.current_round == RoundKey.ROUND1
        assert match.current_turn == "D"

    def test_ring_continues_into_next_round(self, match):
        """The player after D opens the next round."""
        play_round(match, [1, 2, 3, 4])
        assert match.current_turn == "A"
        match.apply_play("A", Card(value=5, suit=Suit.HEARTS))
        assert match.get_round_plays(RoundKey.ROUND2)[0].player_id == "A"

    def test_sweep_ends_after_round2(self, match):
        """Scenario B: team1 wins two rounds and round3 never takes a play."""
        play_round(match, [12, 5, 3, 4])
        play_round(match, [2, 5, 12, 4])

        assert match.round_winners == {
            RoundKey.ROUND1: TeamKey.TEAM1,
            RoundKey.ROUND2: TeamKey.TEAM1,
        }
        assert match.game_winner == TeamKey.TEAM1
        assert match.is_complete
        assert match.get_round_plays(RoundKey.ROUND3) == []

        with pytest.raises(MatchCompleteError):
            match.apply_play(match.current_turn, Card(value=13, suit=Suit.HEARTS))
        assert len(match.plays) == 8

    def test_split_goes_to_round3(self, match):
        """Scenario C: 1-1 after two rounds, round3 decides."""
        play_round(match, [13, 1, 2, 3])
        assert match.round_winners[RoundKey.ROUND1] == TeamKey.TEAM1
        play_round(match, [1, 13, 2, 3])
        assert match.round_winners[RoundKey.ROUND2] == TeamKey.TEAM2
        assert match.current_round == RoundKey.ROUND3
        assert not match.is_complete

        play_round(match, [1, 2, 3, 13])
        assert match.round_winners[RoundKey.ROUND3] == TeamKey.TEAM2
        assert match.game_winner == TeamKey.TEAM2
        assert match.is_complete
        assert len(match.plays) == 12
        assert "won by team2" in str(match)

    def test_tie_in_round(self, match):
        """Equal top cards: C's 13 came first, so team2 takes the round."""
        play_round(match, [5, 13, 2, 13])
        assert match.round_winners[RoundKey.ROUND1] == TeamKey.TEAM2

    def test_round_resolved_twice(self, match):
        """Closing a round that already has a winner is an invariant violation."""
        for player, value in zip(RING[:3], [1, 2, 3], strict=True):
            match.apply_play(player, Card(value=value, suit=Suit.HEARTS))
        match.round_winners[RoundKey.ROUND1] = TeamKey.TEAM2
        with pytest.raises(InvariantViolation):
            match.apply_play("D", Card(value=4, suit=Suit.HEARTS))


@given(st.lists(st.integers(min_value=1, max_value=13), min_size=12, max_size=12))
@settings(max_examples=150, deadline=None)
def test_full_match_invariants(values):
    """Every run of in-turn plays respects turn, round and series rules."""
    match = Match.create(Team("A", "B"), Team("C", "D"), match_id="prop")
    ring = match.seating

    for value in values:
        if match.is_complete:
            with pytest.raises(MatchCompleteError):
                match.apply_play(match.current_turn, Card(value=value, suit=Suit.HEARTS))
            break

        previous_winner = match.game_winner
        player = match.current_turn
        match.apply_play(player, Card(value=value, suit=Suit.HEARTS))

        # The turn always moves to the next seat
        assert match.current_turn == ring.next_player(player)

        # A round has a winner exactly when it has four plays
        for round_key in RoundKey:
            count = len(match.get_round_plays(round_key))
            assert count <= 4
            assert (round_key in match.round_winners) == (count == 4)

        # Series state only ever moves forward
        assert previous_winner is None or match.game_winner == previous_winner
        assert match.game_winner == evaluate_series(match.round_winners)
        assert match.is_complete == (match.game_winner is not None)

    assert match.is_complete
    assert len(match.plays) in (8, 12)
    # Players never repeat within a round
    for round_key in RoundKey:
        players = [p.player_id for p in match.get_round_plays(round_key)]
        assert len(players) == len(set(players))
