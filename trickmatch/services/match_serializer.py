"""Match serialization for MongoDB persistence.

Handles conversion between Match objects and MongoDB documents.
"""

from datetime import UTC, datetime
from typing import Any

from trickmatch.models.card import Card
from trickmatch.models.enums import RoundKey, Suit, TeamKey
from trickmatch.models.match import Match
from trickmatch.models.play import Play
from trickmatch.models.team import Team


def serialize_card(card: Card) -> dict[str, Any]:
    """Serialize a Card to a dictionary."""
    return {"value": card.value, "suit": card.suit.value}


def deserialize_card(data: dict[str, Any]) -> Card:
    """Deserialize a Card from a dictionary."""
    return Card(value=data["value"], suit=Suit(data["suit"]))


def serialize_team(team: Team) -> dict[str, Any]:
    """Serialize a Team to a dictionary."""
    return {"player1": team.player1, "player2": team.player2}


def deserialize_team(data: dict[str, Any]) -> Team:
    """Deserialize a Team from a dictionary."""
    return Team(player1=data["player1"], player2=data["player2"])


def serialize_play(play: Play) -> dict[str, Any]:
    """Serialize a Play to a dictionary."""
    return {
        "id": play.id,
        "match_id": play.match_id,
        "player_id": play.player_id,
        "round": play.round.value,
        "timestamp": play.timestamp,
        "card": serialize_card(play.card),
    }


def deserialize_play(data: dict[str, Any]) -> Play:
    """Deserialize a Play from a dictionary."""
    return Play(
        id=data["id"],
        match_id=data["match_id"],
        player_id=data["player_id"],
        round=RoundKey(data["round"]),
        timestamp=data["timestamp"],
        card=deserialize_card(data["card"]),
    )


def serialize_match(match: Match) -> dict[str, Any]:
    """Serialize a complete Match to a MongoDB document.

    Plays are embedded so one document write commits a play together with
    the turn, round and series changes it caused.

    Args:
        match: Match instance to serialize

    Returns:
        Dictionary suitable for MongoDB storage
    """
    return {
        "_id": match.id,
        "team1": serialize_team(match.team1),
        "team2": serialize_team(match.team2),
        "current_turn": match.current_turn,
        "current_round": match.current_round.value,
        "round_winners": {
            round_key.value: team.value for round_key, team in match.round_winners.items()
        },
        "game_winner": match.game_winner.value if match.game_winner else None,
        "is_complete": match.is_complete,
        "plays": [serialize_play(p) for p in match.plays],
        "version": match.version,
        "created_at": match.created_at or datetime.now(UTC).isoformat(),
        "updated_at": match.updated_at or datetime.now(UTC).isoformat(),
    }


def deserialize_match(data: dict[str, Any]) -> Match:
    """Deserialize a Match from a MongoDB document.

    Args:
        data: MongoDB document

    Returns:
        Match instance with full state restored
    """
    game_winner = data.get("game_winner")
    return Match(
        id=data["_id"],
        team1=deserialize_team(data["team1"]),
        team2=deserialize_team(data["team2"]),
        current_turn=data["current_turn"],
        current_round=RoundKey(data.get("current_round", RoundKey.ROUND1.value)),
        round_winners={
            RoundKey(round_key): TeamKey(team)
            for round_key, team in data.get("round_winners", {}).items()
        },
        game_winner=TeamKey(game_winner) if game_winner else None,
        is_complete=data.get("is_complete", False),
        plays=[deserialize_play(p) for p in data.get("plays", [])],
        version=data.get("version", 0),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )
