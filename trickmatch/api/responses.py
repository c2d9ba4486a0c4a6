"""Request models and DTOs."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from trickmatch.exceptions import ErrorCode
from trickmatch.models.enums import Command
from trickmatch.models.team import Team
from trickmatch.services.projection import MatchSummary

__all__ = [
    "ActiveMatchesResponse",
    "CardPayload",
    "Command",
    "CreateMatchRequest",
    "ErrorCode",
    "ErrorResponse",
    "ServerMessage",
    "SubmitPlayRequest",
    "TeamPayload",
]


class TeamPayload(BaseModel):
    """Team roster in a request."""

    player1: str
    player2: str

    def to_team(self) -> Team:
        """Convert to the domain model."""
        return Team(player1=self.player1, player2=self.player2)


class CreateMatchRequest(BaseModel):
    """Request to create a new match."""

    team1: TeamPayload
    team2: TeamPayload


class CardPayload(BaseModel):
    """Card in a request. Range and suit are checked by the match core."""

    value: Any = None
    suit: Any = None


class SubmitPlayRequest(BaseModel):
    """Request to play a card."""

    player_id: str
    card: CardPayload


class ActiveMatchesResponse(BaseModel):
    """Response for the active match listing."""

    matches: list[MatchSummary]
    count: int


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: str | None = None


@dataclass
class ServerMessage:
    """Message sent from server to subscribers via WebSocket.

    Attributes:
        command: Command type
        match_id: Match identifier
        content: Message payload (varies by command)

    """

    command: Command
    match_id: str
    content: Any

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "command": self.command.value,
            "match_id": self.match_id,
            "content": self.content,
        }
