"""Card model and validation."""

from dataclasses import dataclass
from typing import Any

from trickmatch.constants import MAX_CARD_VALUE, MIN_CARD_VALUE
from trickmatch.exceptions import ErrorCode, ValidationError
from trickmatch.models.enums import Suit


@dataclass(frozen=True)
class Card:
    """A playing card.

    Attributes:
        value: Card rank, 1-13
        suit: Card suit (stored, not used for resolution)

    """

    value: int
    suit: Suit

    def __post_init__(self) -> None:
        """Reject out-of-range values and unknown suits."""
        # bool is an int subclass; True would otherwise pass as 1
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Card value must be an integer, got {self.value!r}", ErrorCode.INVALID_CARD
            )
        if not MIN_CARD_VALUE <= self.value <= MAX_CARD_VALUE:
            raise ValidationError(
                f"Card value must be {MIN_CARD_VALUE}-{MAX_CARD_VALUE}, got {self.value}",
                ErrorCode.INVALID_CARD,
            )
        if not isinstance(self.suit, Suit):
            raise ValidationError(f"Unknown suit {self.suit!r}", ErrorCode.INVALID_CARD)

    @classmethod
    def from_raw(cls, value: Any, suit: Any) -> "Card":
        """Build a card from untrusted input such as path parameters.

        Args:
            value: Card value, an int or a decimal string
            suit: Suit name, e.g. "hearts"

        Raises:
            ValidationError: If either part is malformed

        """
        if isinstance(value, str):
            # Plain ASCII digits only; int() would also take "1_0", " 7 " or "+5"
            if not (value.isascii() and value.isdigit()):
                raise ValidationError(
                    f"Card value must be an integer, got {value!r}", ErrorCode.INVALID_CARD
                )
            value = int(value)
        try:
            parsed_suit = Suit(suit)
        except ValueError:
            raise ValidationError(f"Unknown suit {suit!r}", ErrorCode.INVALID_CARD) from None
        return cls(value=value, suit=parsed_suit)

    def __str__(self) -> str:
        """Return string representation of card."""
        return f"{self.value} of {self.suit.value}"
