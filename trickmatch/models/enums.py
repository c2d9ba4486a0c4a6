"""Enums and constants for the match."""

from enum import Enum


class Suit(str, Enum):
    """Card suits. Recorded with each play but never used to resolve a round."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"


class RoundKey(str, Enum):
    """Rounds of the best-of-three series, in play order."""

    ROUND1 = "round1"
    ROUND2 = "round2"
    ROUND3 = "round3"

    def next(self) -> "RoundKey | None":
        """Return the round that follows this one, or None after round3."""
        order = list(RoundKey)
        index = order.index(self)
        if index + 1 < len(order):
            return order[index + 1]
        return None


class TeamKey(str, Enum):
    """Team slots of a match."""

    TEAM1 = "team1"
    TEAM2 = "team2"


class Command(str, Enum):
    """WebSocket / pub-sub commands."""

    # Commands sent to subscribers
    MATCH_STATE = "MATCH_STATE"  # Full state on subscribe
    MATCH_CREATED = "MATCH_CREATED"
    MATCH_UPDATED = "MATCH_UPDATED"
    REPORT_ERROR = "REPORT_ERROR"

    # Commands from client
    PING = "PING"
    SYNC_STATE = "SYNC_STATE"
