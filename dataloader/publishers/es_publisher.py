"""
Elasticsearch Publisher.

Recreates the movie search index and bulk-writes the enriched movies,
using mid as the document id.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple, Type

import pandas as pd
from elasticsearch import ApiError, Elasticsearch, TransportError
from elasticsearch.helpers import BulkIndexError, bulk

from dataloader.errors import (
    BulkWriteFailedError,
    IndexOperationError,
    PipelineError,
    STAGE_PUBLISH_SEARCH,
    StoreConnectionError,
)
from dataloader.publishers.documents import chunked, iter_documents
from dataloader.utils.deadline import Deadline

logger = logging.getLogger(__name__)

ES_MOVIE_TYPE_NAME = "Movie"
DOCUMENT_ID_FIELD = "mid"


def to_node_configs(hosts: List[Tuple[str, int]]) -> List[Dict]:
    return [{"host": host, "port": port, "scheme": "http"} for host, port in hosts]


class ElasticsearchPublisher:
    """
    Full-replace publisher for the search index.

    Index administration (cluster check, exists/delete/create) goes through
    the admin hosts; documents go through the HTTP bulk hosts.
    """

    def __init__(
        self,
        http_hosts: List[Tuple[str, int]],
        admin_hosts: List[Tuple[str, int]],
        index: str,
        cluster_name: str,
        chunk_size: int = 1000,
        client_factory=Elasticsearch
    ):
        """
        Initialize Elasticsearch publisher.

        Args:
            http_hosts: (host, port) pairs used for bulk writes
            admin_hosts: (host, port) pairs used for index administration
            index: Target index name
            cluster_name: Expected cluster name
            chunk_size: Documents per bulk request
            client_factory: Callable creating a client (Elasticsearch by default)
        """
        self.http_hosts = http_hosts
        self.admin_hosts = admin_hosts
        self.index = index
        self.cluster_name = cluster_name
        self.chunk_size = chunk_size
        self.client_factory = client_factory

    def publish(self, movies: pd.DataFrame, deadline: Optional[Deadline] = None) -> int:
        """
        Delete and recreate the index, then bulk-write the enriched movies.

        Args:
            movies: Enriched movie DataFrame (must contain "mid")
            deadline: Run deadline (no deadline if None)

        Returns:
            Number of documents indexed

        Raises:
            StoreConnectionError: Cluster unreachable, wrong cluster or deadline expired
            IndexOperationError: Index delete/create failed
            BulkWriteFailedError: Bulk indexing reported failures
        """
        deadline = deadline or Deadline(0)
        logger.info(f"Publishing {len(movies)} movies to Elasticsearch index '{self.index}'")

        admin_client = self.client_factory(hosts=to_node_configs(self.admin_hosts))
        try:
            bulk_client = self.client_factory(hosts=to_node_configs(self.http_hosts))
            try:
                self._verify_cluster(admin_client, deadline)
                self._recreate_index(admin_client, deadline)
                written = self._bulk_write(bulk_client, movies, deadline)

                with self._step("refresh index", deadline, IndexOperationError):
                    self._bounded(admin_client, deadline).indices.refresh(index=self.index)

                logger.info(f"Elasticsearch publish complete: {written} documents")
                return written
            finally:
                bulk_client.close()
        finally:
            admin_client.close()
            logger.debug("Closed Elasticsearch clients")

    def _verify_cluster(self, client, deadline: Deadline) -> None:
        with self._step("cluster info", deadline, StoreConnectionError):
            info = self._bounded(client, deadline).info()

        actual = info["cluster_name"]
        if actual != self.cluster_name:
            logger.error(f"Connected to cluster '{actual}', expected '{self.cluster_name}'")
            raise StoreConnectionError(
                f"Connected to cluster '{actual}', expected '{self.cluster_name}'",
                stage=STAGE_PUBLISH_SEARCH
            )

    def _recreate_index(self, client, deadline: Deadline) -> None:
        """Explicit exists -> delete -> create, so every run starts from an empty mapping."""
        with self._step(f"check index {self.index}", deadline, IndexOperationError):
            exists = bool(self._bounded(client, deadline).indices.exists(index=self.index))

        if exists:
            with self._step(f"delete index {self.index}", deadline, IndexOperationError):
                self._bounded(client, deadline).indices.delete(index=self.index)
            logger.info(f"Deleted index {self.index}")

        with self._step(f"create index {self.index}", deadline, IndexOperationError):
            self._bounded(client, deadline).indices.create(index=self.index)
        logger.info(f"Created index {self.index}")

    def _bulk_write(self, client, movies: pd.DataFrame, deadline: Deadline) -> int:
        written = 0
        for chunk in chunked(self._actions(movies), self.chunk_size):
            with self._step(f"bulk write {self.index}/{ES_MOVIE_TYPE_NAME}", deadline, BulkWriteFailedError):
                succeeded, _ = bulk(
                    self._bounded(client, deadline),
                    chunk,
                    chunk_size=self.chunk_size,
                )
            written += succeeded
        logger.info(f"Indexed {written} documents into {self.index}")
        return written

    def _actions(self, movies: pd.DataFrame) -> Iterator[Dict]:
        # Movies without tags are indexed without a tags field
        for document in iter_documents(movies, drop_nulls=True):
            yield {
                "_index": self.index,
                "_id": document[DOCUMENT_ID_FIELD],
                "_source": document,
            }

    @staticmethod
    def _bounded(client, deadline: Deadline):
        remaining = deadline.remaining()
        if remaining is None:
            return client
        return client.options(request_timeout=max(remaining, 0.001))

    @contextmanager
    def _step(self, step: str, deadline: Deadline, error_cls: Type[PipelineError]):
        """Check the deadline and translate elasticsearch errors."""
        deadline.check(step, stage=STAGE_PUBLISH_SEARCH)
        try:
            yield
        except BulkIndexError as e:
            logger.error(f"Elasticsearch bulk write failed during {step}: {len(e.errors)} errors")
            raise BulkWriteFailedError(
                f"{step} failed for {len(e.errors)} documents",
                stage=STAGE_PUBLISH_SEARCH
            ) from e
        except ApiError as e:
            logger.error(f"Elasticsearch request failed during {step}: {e}")
            raise error_cls(
                f"Elasticsearch request failed during {step}: {e}",
                stage=STAGE_PUBLISH_SEARCH
            ) from e
        except TransportError as e:
            logger.error(f"Elasticsearch connection failure during {step}: {e}")
            raise StoreConnectionError(
                f"Elasticsearch connection failure during {step}: {e}",
                stage=STAGE_PUBLISH_SEARCH
            ) from e
