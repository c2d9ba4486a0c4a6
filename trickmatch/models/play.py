"""Play model."""

import time
import uuid
from dataclasses import dataclass, field

from trickmatch.models.card import Card
from trickmatch.models.enums import RoundKey


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Play:
    """A card played by one player in one round. Immutable once recorded."""

    match_id: str
    player_id: str
    round: RoundKey
    card: Card
    timestamp: int = field(default_factory=now_ms)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
