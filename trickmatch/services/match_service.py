"""Match transaction core.

``submit_play`` is the only way gameplay state changes. Each call runs a
load-validate-apply-save cycle inside the lock of its match, on a private copy
loaded from the store, so a rejected or failed submission leaves nothing
behind and a reader only ever sees fully committed states.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from trickmatch.config import settings
from trickmatch.exceptions import (
    InvariantViolation,
    MatchCompleteError,
    MatchError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from trickmatch.models.card import Card
from trickmatch.models.enums import Command
from trickmatch.models.match import Match
from trickmatch.models.team import Team
from trickmatch.repositories.base import MatchStore
from trickmatch.services.log_service import LogService
from trickmatch.services.match_locks import MatchLocks
from trickmatch.services.notifier import ChangeNotifier
from trickmatch.services.projection import (
    MatchProjection,
    MatchSummary,
    PlaysView,
    project_match,
    project_plays,
    summarize_match,
)

logger = logging.getLogger(__name__)


def coerce_card(card: Card | Mapping[str, Any]) -> Card:
    """Turn a submitted card into a validated Card.

    Raises:
        ValidationError: If the card is malformed

    """
    if isinstance(card, Card):
        return card
    if isinstance(card, Mapping):
        return Card.from_raw(card.get("value"), card.get("suit"))
    raise ValidationError(f"Malformed card {card!r}")


class MatchService:
    """Creates matches and commits plays against a match store.

    Submissions to the same match are serialized; submissions to different
    matches run independently. Change notifiers are called after the lock is
    released and their failures never undo a commit.
    """

    def __init__(
        self,
        store: MatchStore,
        notifiers: Iterable[ChangeNotifier] = (),
        log_service: LogService | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Persistence collaborator
            notifiers: Listeners for committed changes
            log_service: Audit logger for committed transitions

        """
        self.store = store
        self.notifiers: list[ChangeNotifier] = list(notifiers)
        self.log_service = log_service or LogService()
        self.locks = MatchLocks()

    def add_notifier(self, notifier: ChangeNotifier) -> None:
        """Register another change listener."""
        self.notifiers.append(notifier)

    async def create_match(self, team1: Team, team2: Team) -> MatchProjection:
        """Create a match with team1.player1 to open round1.

        Raises:
            ValidationError: If the roster is not four distinct identities
            StoreError: If the match could not be persisted

        """
        match = Match.create(team1, team2)
        await self.store.insert(match)
        self.log_service.info(
            {
                "event": "match_created",
                "match_id": match.id,
                "team1": f"{team1.player1},{team1.player2}",
                "team2": f"{team2.player1},{team2.player2}",
            }
        )

        projection = project_match(match)
        await self._notify(Command.MATCH_CREATED, match.id, projection)
        return projection

    async def submit_play(
        self, match_id: str, player_id: str, card: Card | Mapping[str, Any]
    ) -> MatchProjection:
        """Validate and commit one play.

        Preconditions are checked in order: match exists and is not complete,
        card is valid, then it is player_id's turn.

        Args:
            match_id: Match to play in
            player_id: Player submitting the card
            card: A Card, or a mapping with "value" and "suit"

        Returns:
            Projection of the committed state

        Raises:
            NotFoundError: Unknown match
            MatchCompleteError: Series already decided
            ValidationError: Malformed card
            TurnError: Not player_id's turn
            StoreError: The store failed; nothing was committed

        """
        try:
            async with self.locks.hold(match_id):
                match = await self._load(match_id)
                if match.is_complete:
                    raise MatchCompleteError(match_id)
                valid_card = coerce_card(card)

                expected_version = match.version
                round_key = match.current_round
                play = match.apply_play(player_id, valid_card)
                await self.store.save(match, expected_version)
                projection = project_match(match)
        except InvariantViolation:
            logger.exception("Invariant violated while committing play to match %s", match_id)
            raise
        except StoreError as e:
            self.log_service.error(
                {
                    "event": "play_store_failed",
                    "match_id": match_id,
                    "player_id": player_id,
                    "error": e,
                }
            )
            raise
        except MatchError as e:
            logger.info(
                "Rejected play from %s in match %s: %s (%s)",
                player_id,
                match_id,
                e.message,
                e.code.value,
            )
            raise

        round_winner = match.round_winners.get(round_key)
        self.log_service.info(
            {
                "event": "play_committed",
                "match_id": match_id,
                "player_id": player_id,
                "round": round_key.value,
                "card": str(play.card),
                "round_winner": round_winner.value if round_winner else "-",
                "next_turn": match.current_turn,
                "game_winner": match.game_winner.value if match.game_winner else "-",
                "version": match.version,
            }
        )

        await self._notify(Command.MATCH_UPDATED, match_id, projection)
        return projection

    async def get_match(self, match_id: str) -> MatchProjection:
        """Get the full view of a match.

        Raises:
            NotFoundError: Unknown match

        """
        return project_match(await self._load(match_id))

    async def list_active_matches(self, limit: int | None = None) -> list[MatchSummary]:
        """Summaries of every match that is not complete."""
        matches = await self.store.find_active(limit or settings.active_matches_limit)
        return [summarize_match(m) for m in matches]

    async def get_plays(self, match_id: str) -> PlaysView:
        """Plays of a match grouped by round.

        Raises:
            NotFoundError: Unknown match

        """
        return project_plays(await self._load(match_id))

    async def _load(self, match_id: str) -> Match:
        match = await self.store.load(match_id)
        if match is None:
            raise NotFoundError(match_id)
        return match

    async def _notify(self, command: Command, match_id: str, projection: MatchProjection) -> None:
        """Fan a committed change out to every notifier."""
        for notifier in self.notifiers:
            try:
                await notifier.notify(command, match_id, projection)
            except Exception:
                # Already committed; a broken listener must not fail the caller
                logger.exception(
                    "Notifier %s failed for match %s", type(notifier).__name__, match_id
                )
