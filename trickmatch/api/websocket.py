"""WebSocket subscriber hub."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastapi import WebSocket, WebSocketDisconnect

from trickmatch.api.responses import ServerMessage
from trickmatch.exceptions import MatchError
from trickmatch.models.enums import Command
from trickmatch.services.notifier import ChangeNotifier

if TYPE_CHECKING:
    from trickmatch.services.match_service import MatchService
    from trickmatch.services.projection import MatchProjection

logger = logging.getLogger(__name__)


class ConnectionManager(ChangeNotifier):
    """Manages WebSocket subscribers of matches.

    Handles:
    - Subscriber connections per match
    - Broadcasting committed changes
    - Connection lifecycle
    """

    def __init__(self) -> None:
        """Initialize the connection manager."""
        # match_id -> subscriber_id -> WebSocket
        self.subscriptions: dict[str, dict[str, WebSocket]] = {}
        self._match_service: MatchService | None = None

    def set_match_service(self, match_service: MatchService | None) -> None:
        """Set the service used to answer state sync requests."""
        self._match_service = match_service

    async def connect(self, websocket: WebSocket, match_id: str, subscriber_id: str) -> None:
        """Accept a new WebSocket connection for a subscriber.

        Args:
            websocket: WebSocket connection
            match_id: Match identifier
            subscriber_id: Subscriber identifier

        """
        await websocket.accept()

        if match_id not in self.subscriptions:
            self.subscriptions[match_id] = {}

        self.subscriptions[match_id][subscriber_id] = websocket
        logger.info("Subscriber %s connected to match %s", subscriber_id, match_id)

    def disconnect(self, match_id: str, subscriber_id: str) -> None:
        """Remove a subscriber connection.

        Args:
            match_id: Match identifier
            subscriber_id: Subscriber identifier

        """
        if match_id in self.subscriptions and subscriber_id in self.subscriptions[match_id]:
            del self.subscriptions[match_id][subscriber_id]
            logger.info("Subscriber %s disconnected from match %s", subscriber_id, match_id)

            if not self.subscriptions[match_id]:
                del self.subscriptions[match_id]

    def get_subscriber_count(self, match_id: str) -> int:
        """Get the number of subscribers for a match."""
        return len(self.subscriptions.get(match_id, {}))

    async def send_personal_message(
        self, message: ServerMessage, match_id: str, subscriber_id: str
    ) -> None:
        """Send message to one subscriber.

        Args:
            message: Message to send
            match_id: Match identifier
            subscriber_id: Subscriber identifier

        """
        websocket = self.subscriptions.get(match_id, {}).get(subscriber_id)
        if websocket is None:
            return
        try:
            await websocket.send_json(message.to_dict())
        except (WebSocketDisconnect, RuntimeError, ConnectionError, OSError):
            logger.warning("Connection lost to %s", subscriber_id)
            self.disconnect(match_id, subscriber_id)

    async def broadcast_to_match(self, message: ServerMessage, match_id: str) -> None:
        """Broadcast message to all subscribers of a match.

        Args:
            message: Message to broadcast
            match_id: Match identifier

        """
        disconnected = []

        for subscriber_id, websocket in list(self.subscriptions.get(match_id, {}).items()):
            try:
                await websocket.send_json(message.to_dict())
            except (WebSocketDisconnect, RuntimeError, ConnectionError, OSError):
                logger.warning("Connection lost to subscriber %s", subscriber_id)
                disconnected.append(subscriber_id)

        for subscriber_id in disconnected:
            self.disconnect(match_id, subscriber_id)

    async def notify(self, command: Command, match_id: str, projection: MatchProjection) -> None:
        """Push a committed change to local subscribers."""
        await self.broadcast_to_match(
            ServerMessage(
                command=command,
                match_id=match_id,
                content=projection.model_dump(mode="json"),
            ),
            match_id,
        )

    async def send_match_state(self, match_id: str, subscriber_id: str) -> None:
        """Send the current committed state of a match to one subscriber."""
        if self._match_service is None:
            return
        try:
            projection = await self._match_service.get_match(match_id)
        except MatchError as e:
            message = ServerMessage(
                command=Command.REPORT_ERROR,
                match_id=match_id,
                content={"error": e.message, "code": e.code.value},
            )
        else:
            message = ServerMessage(
                command=Command.MATCH_STATE,
                match_id=match_id,
                content=projection.model_dump(mode="json"),
            )
        await self.send_personal_message(message, match_id, subscriber_id)

    async def handle_subscriber_message(
        self, websocket: WebSocket, match_id: str, subscriber_id: str
    ) -> None:
        """Handle incoming messages from a subscriber.

        Subscribers only observe; they may ping or ask for a fresh state.

        Args:
            websocket: WebSocket connection
            match_id: Match identifier
            subscriber_id: Subscriber identifier

        """
        try:
            while True:
                data = await websocket.receive_text()
                message = json.loads(data)
                if not isinstance(message, dict):
                    continue

                command = message.get("command", "")
                logger.debug("Subscriber %s sent %s", subscriber_id, command)

                if command == Command.PING.value:
                    await websocket.send_json({"command": "PONG"})
                elif command == Command.SYNC_STATE.value:
                    await self.send_match_state(match_id, subscriber_id)

        except WebSocketDisconnect:
            logger.info("Subscriber %s disconnected from match %s", subscriber_id, match_id)
            self.disconnect(match_id, subscriber_id)

        except (RuntimeError, ConnectionError, OSError, json.JSONDecodeError) as e:
            logger.warning("Error handling message from %s: %s", subscriber_id, e)
            self.disconnect(match_id, subscriber_id)


# Global WebSocket manager instance
websocket_manager = ConnectionManager()
