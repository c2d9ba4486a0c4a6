"""Domain exceptions raised by the match core.

Every user-facing rejection derives from ``MatchError`` and carries an
``ErrorCode`` the API layer can hand to clients. ``InvariantViolation`` is
deliberately outside that hierarchy: it signals a programming error, not bad
input.
"""

from enum import StrEnum


class ErrorCode(StrEnum):
    """Error codes for i18n translation on the frontend."""

    INVALID_CARD = "error.invalidCard"
    INVALID_ROSTER = "error.invalidRoster"
    UNKNOWN_PLAYER = "error.unknownPlayer"
    NOT_YOUR_TURN = "error.notYourTurn"
    MATCH_NOT_FOUND = "error.matchNotFound"
    MATCH_COMPLETE = "error.matchComplete"
    STORE_UNAVAILABLE = "error.storeUnavailable"
    CONCURRENT_MODIFICATION = "error.concurrentModification"


class MatchError(Exception):
    """Base class for all caller-visible match errors."""

    code: ErrorCode = ErrorCode.INVALID_CARD

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(MatchError):
    """Malformed card, roster or request."""

    code = ErrorCode.INVALID_CARD


class TurnError(MatchError):
    """Play submitted by someone other than the current turn holder."""

    code = ErrorCode.NOT_YOUR_TURN

    def __init__(self, player_id: str, current_turn: str) -> None:
        super().__init__("not your turn")
        self.player_id = player_id
        self.current_turn = current_turn


class NotFoundError(MatchError):
    """Unknown match id."""

    code = ErrorCode.MATCH_NOT_FOUND

    def __init__(self, match_id: str) -> None:
        super().__init__(f"Match {match_id} not found")
        self.match_id = match_id


class MatchCompleteError(MatchError):
    """Play submitted after the series was decided."""

    code = ErrorCode.MATCH_COMPLETE

    def __init__(self, match_id: str) -> None:
        super().__init__(f"Match {match_id} is already complete")
        self.match_id = match_id


class StoreError(MatchError):
    """The persistence collaborator failed."""

    code = ErrorCode.STORE_UNAVAILABLE


class ConcurrencyConflictError(StoreError):
    """Another writer committed a newer version of the match first."""

    code = ErrorCode.CONCURRENT_MODIFICATION

    def __init__(self, match_id: str, expected_version: int) -> None:
        super().__init__(
            f"Match {match_id} was modified concurrently (expected version {expected_version})"
        )
        self.match_id = match_id
        self.expected_version = expected_version


class InvariantViolation(RuntimeError):  # noqa: N818
    """Internal state broke a rule the core guarantees."""
