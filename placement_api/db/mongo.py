"""
placement_api/db/mongo.py

Purpose: MongoDB store handle

- Owns the Motor client, the users collection and the GridFS avatar bucket
- Explicit connect/close lifecycle driven by the application lifespan
- Health checks and startup retry logic
"""

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
    AsyncIOMotorGridFSBucket,
)
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from typing import Optional
import asyncio

from placement_api.core.config import Settings, settings as default_settings
from placement_api.core.logging import get_logger

logger = get_logger(__name__)


class MongoStore:
    """
    Handle on the document database and the avatar blob store.

    One instance is created per application and stored on ``app.state``;
    request handlers receive it through dependency injection.
    """

    def __init__(self, config: Optional[Settings] = None, max_retries: int = 3, retry_delay: float = 2):
        self.config = config or default_settings
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None
        self._avatars: Optional[AsyncIOMotorGridFSBucket] = None

    async def connect(self):
        """
        Establishes connection to MongoDB with retry logic.
        Called during application startup.
        """
        if self._client is not None:
            logger.warning("MongoDB client already initialized")
            return

        delay = self.retry_delay

        for attempt in range(1, self.max_retries + 1):
            client = None
            try:
                logger.info(
                    f"Attempting to connect to MongoDB (attempt {attempt}/{self.max_retries})"
                )

                client = AsyncIOMotorClient(
                    self.config.MONGODB_URL,
                    maxPoolSize=50,
                    minPoolSize=5,
                    serverSelectionTimeoutMS=5000,
                    connectTimeoutMS=10000,
                    retryWrites=True,
                    retryReads=True,
                )

                # Verify connection
                await client.admin.command("ping")

                self._client = client
                self._database = client[self.config.MONGODB_DB_NAME]
                self._avatars = AsyncIOMotorGridFSBucket(
                    self._database,
                    bucket_name=self.config.AVATAR_BUCKET_NAME,
                )

                logger.info(
                    f"✅ Successfully connected to MongoDB: {self.config.MONGODB_DB_NAME}"
                )
                return

            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(
                    f"Failed to connect to MongoDB (attempt {attempt}/{self.max_retries}): {e}"
                )
                if client is not None:
                    client.close()

                if attempt < self.max_retries:
                    logger.info(f"Retrying in {delay} seconds...")
                    await asyncio.sleep(delay)
                    delay *= 2  # Exponential backoff
                else:
                    logger.critical("Failed to connect to MongoDB after all retries")
                    raise ConnectionError("Could not establish MongoDB connection") from e

    async def close(self):
        """
        Closes the MongoDB connection.
        Called during application shutdown.
        """
        if self._client:
            logger.info("Closing MongoDB connection")
            self._client.close()
            self._client = None
            self._database = None
            self._avatars = None
            logger.info("MongoDB connection closed")

    async def ping(self) -> bool:
        """
        Checks if the database connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        if self._client is None:
            logger.error("MongoDB client not initialized")
            return False

        try:
            await self._client.admin.command("ping")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {str(e)}")
            return False

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._database is None:
            raise RuntimeError(
                "Database not initialized. Call MongoStore.connect() during startup."
            )
        return self._database

    @property
    def users(self) -> AsyncIOMotorCollection:
        """The users collection."""
        return self.database[self.config.USERS_COLLECTION]

    @property
    def avatars(self) -> AsyncIOMotorGridFSBucket:
        """GridFS bucket holding profile pictures."""
        if self._avatars is None:
            raise RuntimeError(
                "Database not initialized. Call MongoStore.connect() during startup."
            )
        return self._avatars
