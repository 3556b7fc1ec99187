"""
MongoDB Publisher.

Replaces the Movie, Rating and Tag collections with the parsed datasets
and rebuilds their lookup indexes.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Optional, Type

import pandas as pd
import pymongo
from pymongo import ASCENDING, MongoClient
from pymongo.errors import BulkWriteError, ConnectionFailure, PyMongoError

from dataloader.errors import (
    BulkWriteFailedError,
    IndexOperationError,
    PipelineError,
    STAGE_PUBLISH_DOCUMENT_STORE,
    StoreConnectionError,
)
from dataloader.publishers.documents import chunked, iter_documents
from dataloader.utils.deadline import Deadline

logger = logging.getLogger(__name__)

MOVIES_COLLECTION_NAME = "Movie"
RATINGS_COLLECTION_NAME = "Rating"
TAGS_COLLECTION_NAME = "Tag"

# collection -> indexed fields
COLLECTION_INDEXES = {
    MOVIES_COLLECTION_NAME: ["mid"],
    RATINGS_COLLECTION_NAME: ["mid", "uid"],
    TAGS_COLLECTION_NAME: ["mid", "uid"],
}


class MongoPublisher:
    """
    Full-replace publisher for the document store.

    Not an upsert: every run drops the three collections before writing.
    The client is closed on every exit path.
    """

    def __init__(
        self,
        uri: str,
        db_name: str,
        chunk_size: int = 1000,
        client_factory=MongoClient
    ):
        """
        Initialize MongoDB publisher.

        Args:
            uri: MongoDB connection URI
            db_name: Target database name
            chunk_size: Documents per insert_many call
            client_factory: Callable creating the client (MongoClient by default)
        """
        self.uri = uri
        self.db_name = db_name
        self.chunk_size = chunk_size
        self.client_factory = client_factory

    def publish(
        self,
        movies: pd.DataFrame,
        ratings: pd.DataFrame,
        tags: pd.DataFrame,
        deadline: Optional[Deadline] = None
    ) -> Dict[str, int]:
        """
        Drop, rewrite and index the three collections.

        Args:
            movies: Movie DataFrame
            ratings: Rating DataFrame
            tags: Tag DataFrame
            deadline: Run deadline (no deadline if None)

        Returns:
            Number of documents written per collection

        Raises:
            StoreConnectionError: MongoDB unreachable or deadline expired
            IndexOperationError: Dropping a collection or creating an index failed
            BulkWriteFailedError: A bulk insert failed
        """
        deadline = deadline or Deadline(0)
        datasets = {
            MOVIES_COLLECTION_NAME: movies,
            RATINGS_COLLECTION_NAME: ratings,
            TAGS_COLLECTION_NAME: tags,
        }

        logger.info(f"Publishing to MongoDB database '{self.db_name}'")
        client = self._connect(deadline)
        try:
            with self._step("ping", deadline, StoreConnectionError):
                client.admin.command("ping")

            db = client[self.db_name]

            for name in datasets:
                with self._step(f"drop collection {name}", deadline, IndexOperationError):
                    db.drop_collection(name)
                logger.info(f"Dropped collection {name}")

            counts = {}
            for name, frame in datasets.items():
                counts[name] = self._write_collection(db[name], name, frame, deadline)

            for name, fields in COLLECTION_INDEXES.items():
                for field in fields:
                    with self._step(f"create index {name}.{field}", deadline, IndexOperationError):
                        db[name].create_index([(field, ASCENDING)])
                    logger.debug(f"Created index on {name}.{field}")

            logger.info(f"MongoDB publish complete: {counts}")
            return counts

        finally:
            client.close()
            logger.debug("Closed MongoDB client")

    def _connect(self, deadline: Deadline):
        timeout_ms = self._timeout_ms(deadline)
        options = {}
        if timeout_ms is not None:
            options = {
                "serverSelectionTimeoutMS": timeout_ms,
                "connectTimeoutMS": timeout_ms,
            }
        try:
            return self.client_factory(self.uri, **options)
        except PyMongoError as e:
            logger.error(f"Failed to create MongoDB client for {self.uri}: {e}")
            raise StoreConnectionError(
                f"Cannot connect to MongoDB at {self.uri}: {e}",
                stage=STAGE_PUBLISH_DOCUMENT_STORE
            ) from e

    def _write_collection(self, collection, name: str, frame: pd.DataFrame, deadline: Deadline) -> int:
        written = 0
        for chunk in chunked(iter_documents(frame), self.chunk_size):
            with self._step(f"insert into {name}", deadline, BulkWriteFailedError):
                result = collection.insert_many(chunk)
            written += len(result.inserted_ids)
        logger.info(f"Wrote {written} documents to {name}")
        return written

    @contextmanager
    def _step(self, step: str, deadline: Deadline, error_cls: Type[PipelineError]):
        """
        Check the deadline, bound the step by the remaining budget and
        translate pymongo errors.
        """
        deadline.check(step, stage=STAGE_PUBLISH_DOCUMENT_STORE)
        try:
            with pymongo.timeout(deadline.remaining()):
                yield
        except ConnectionFailure as e:
            logger.error(f"MongoDB connection failure during {step}: {e}")
            raise StoreConnectionError(
                f"MongoDB connection failure during {step}: {e}",
                stage=STAGE_PUBLISH_DOCUMENT_STORE
            ) from e
        except BulkWriteError as e:
            write_errors = e.details.get("writeErrors", [])
            logger.error(f"MongoDB bulk write failed during {step}: {len(write_errors)} errors")
            raise BulkWriteFailedError(
                f"{step} failed with {len(write_errors)} write errors",
                stage=STAGE_PUBLISH_DOCUMENT_STORE
            ) from e
        except PyMongoError as e:
            logger.error(f"MongoDB operation failed during {step}: {e}")
            raise error_cls(
                f"MongoDB operation failed during {step}: {e}",
                stage=STAGE_PUBLISH_DOCUMENT_STORE
            ) from e

    @staticmethod
    def _timeout_ms(deadline: Deadline) -> Optional[int]:
        remaining = deadline.remaining()
        if remaining is None:
            return None
        return max(1, int(remaining * 1000))
