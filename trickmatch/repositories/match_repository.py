"""Match repository for MongoDB persistence."""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from trickmatch.config import settings
from trickmatch.exceptions import ConcurrencyConflictError, StoreError, ValidationError
from trickmatch.models.match import Match
from trickmatch.repositories.base import MatchStore
from trickmatch.services.match_serializer import deserialize_match, serialize_match

logger = logging.getLogger(__name__)


class MatchRepository(MatchStore):
    """Repository for match persistence using MongoDB.

    Each match, plays included, is a single document, so every committed
    transition is one atomic document replace. Saves are conditional on the
    ``version`` field to catch writers in other processes.
    """

    def __init__(self) -> None:
        """Initialize repository."""
        self.client: AsyncIOMotorClient[dict[str, Any]] | None = None
        self.db: AsyncIOMotorDatabase[dict[str, Any]] | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and create indexes."""
        try:
            self.client = AsyncIOMotorClient(
                settings.mongodb_uri,
                serverSelectionTimeoutMS=2000,  # 2 second timeout
            )
            self.db = self.client[settings.mongodb_database]

            # Verify connection
            await self.client.admin.command("ping")
            logger.info("Connected to MongoDB: %s", settings.mongodb_database)

            await self._create_indexes()

        except PyMongoError:
            logger.warning("MongoDB not available")
            raise

    async def _create_indexes(self) -> None:
        """Create indexes for efficient queries."""
        if self.db is None:
            return

        try:
            # Active listing filters on completion and sorts by update time
            await self.db.matches.create_index(
                [("is_complete", ASCENDING), ("updated_at", DESCENDING)]
            )
            await self.db.matches.create_index([("created_at", DESCENDING)])

            logger.info("MongoDB indexes created successfully")
        except PyMongoError:
            logger.exception("Error creating indexes")

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def _require_db(self) -> AsyncIOMotorDatabase[dict[str, Any]]:
        if self.db is None:
            raise StoreError("MongoDB is not connected")
        return self.db

    async def insert(self, match: Match) -> None:
        """Save a new match to the database.

        Args:
            match: Match instance to save

        """
        db = self._require_db()
        try:
            await db.matches.insert_one(serialize_match(match))
        except DuplicateKeyError as e:
            raise StoreError(f"Match {match.id} already exists") from e
        except PyMongoError as e:
            logger.exception("Error inserting match %s", match.id)
            raise StoreError(f"Could not create match {match.id}") from e
        logger.debug("Match %s inserted", match.id)

    async def load(self, match_id: str) -> Match | None:
        """Find and restore a match by ID.

        Args:
            match_id: Match identifier

        Returns:
            Restored Match instance or None
        """
        db = self._require_db()
        try:
            result = await db.matches.find_one({"_id": match_id})
        except PyMongoError as e:
            logger.exception("Error finding match %s", match_id)
            raise StoreError(f"Could not load match {match_id}") from e
        if result:
            return deserialize_match(result)
        return None

    async def save(self, match: Match, expected_version: int) -> None:
        """Replace a match if its stored version is still expected_version.

        Args:
            match: Match instance carrying the new state
            expected_version: Version read before the transition was applied

        Raises:
            ConcurrencyConflictError: If another writer got there first
            StoreError: On any driver failure
        """
        db = self._require_db()
        try:
            result = await db.matches.replace_one(
                {"_id": match.id, "version": expected_version},
                serialize_match(match),
            )
        except PyMongoError as e:
            logger.exception("Error saving match %s", match.id)
            raise StoreError(f"Could not save match {match.id}") from e

        if result.matched_count == 0:
            raise ConcurrencyConflictError(match.id, expected_version)
        logger.debug("Match %s saved (version %d)", match.id, match.version)

    async def find_active(self, limit: int) -> list[Match]:
        """Find all incomplete matches.

        Args:
            limit: Maximum number of matches to return

        Returns:
            List of active Match instances
        """
        db = self._require_db()
        try:
            cursor = (
                db.matches.find({"is_complete": False})
                .sort("updated_at", DESCENDING)
                .limit(limit)
            )

            matches = []
            async for doc in cursor:
                try:
                    matches.append(deserialize_match(doc))
                except (KeyError, ValueError, ValidationError) as e:
                    logger.warning("Error deserializing match %s: %s", doc.get("_id"), e)

        except PyMongoError as e:
            logger.exception("Error finding active matches")
            raise StoreError("Could not list active matches") from e
        else:
            logger.debug("Found %d active matches in database", len(matches))
            return matches
