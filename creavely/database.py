# creavely/database.py — MongoDB connection and collection handles

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError

from fastapi import Request
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

RECIPES_COLLECTION = "recipes"
DEFAULT_TIMEOUT_SECONDS = 10


class DatabaseConnectionError(Exception):
    """Raised when the store cannot be reached or does not answer a ping."""


class DatabaseDisconnectError(Exception):
    """Raised when the client cannot be closed within its timeout."""


class Database:
    def __init__(self, client: MongoClient, db_name: str) -> None:
        self.client = client
        self.db_name = db_name
        self.recipes: Collection = client[db_name][RECIPES_COLLECTION]

    @classmethod
    def connect(
        cls,
        uri: str,
        db_name: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> Database:
        """
        Open a client and verify it with a ping.
        Both steps share the same timeout; no retries.
        """
        timeout_ms = int(timeout_seconds * 1000)
        try:
            client: MongoClient = MongoClient(
                uri,
                connectTimeoutMS=timeout_ms,
                serverSelectionTimeoutMS=timeout_ms,
                tz_aware=True,
            )
        except PyMongoError as exc:
            raise DatabaseConnectionError(f"failed to connect to database: {exc}") from exc

        try:
            client.admin.command("ping")
        except PyMongoError as exc:
            client.close()
            raise DatabaseConnectionError(f"failed to ping database: {exc}") from exc

        logger.info("Connected to MongoDB", extra={"database": db_name})
        return cls(client, db_name)

    def close(self, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self.client.close)
        try:
            future.result(timeout=timeout_seconds)
        except FutureTimeoutError as exc:
            raise DatabaseDisconnectError(
                f"failed to disconnect from database within {timeout_seconds}s"
            ) from exc
        except PyMongoError as exc:
            raise DatabaseDisconnectError(f"failed to disconnect from database: {exc}") from exc
        finally:
            executor.shutdown(wait=False)

        logger.info("Disconnected from MongoDB", extra={"database": self.db_name})


def get_database(request: Request) -> Database:
    return request.app.state.database
