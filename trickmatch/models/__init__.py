"""Match domain models."""

from trickmatch.models.card import Card
from trickmatch.models.enums import Command, RoundKey, Suit, TeamKey
from trickmatch.models.match import Match
from trickmatch.models.play import Play
from trickmatch.models.seating import Seating
from trickmatch.models.team import Team

__all__ = [
    "Card",
    "Command",
    "Match",
    "Play",
    "RoundKey",
    "Seating",
    "Suit",
    "Team",
    "TeamKey",
]
