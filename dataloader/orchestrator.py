"""
Pipeline Orchestrator.

Runs one full load: parse -> aggregate -> enrich -> publish search index
-> publish document store -> release cached datasets.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Optional

import pandas as pd

from dataloader.errors import (
    PipelineError,
    STAGE_AGGREGATE,
    STAGE_ENRICH,
    STAGE_PARSE,
    STAGE_PUBLISH_DOCUMENT_STORE,
    STAGE_PUBLISH_SEARCH,
)
from dataloader.models.config import LoaderConfig
from dataloader.publishers.es_publisher import ElasticsearchPublisher
from dataloader.publishers.mongo_publisher import MongoPublisher
from dataloader.stages.aggregation import TagAggregator
from dataloader.stages.enrichment import MovieEnricher
from dataloader.stages.parsing import RecordParser
from dataloader.utils.deadline import Deadline

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """
    Orchestrates a single batch load.

    Sink order is fixed: Elasticsearch first, then MongoDB. There is no
    rollback, so a failure in the MongoDB step leaves the search index
    already rewritten until the next successful run.
    """

    def __init__(
        self,
        config: LoaderConfig,
        es_publisher: Optional[ElasticsearchPublisher] = None,
        mongo_publisher: Optional[MongoPublisher] = None
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            config: Immutable run configuration
            es_publisher: Override for the search publisher (built from config if None)
            mongo_publisher: Override for the document publisher (built from config if None)
        """
        self.config = config

        logger.info("Initializing pipeline components...")

        self.parser = RecordParser(parallelism=config.parallelism)
        self.aggregator = TagAggregator()
        self.enricher = MovieEnricher()

        self.es_publisher = es_publisher or ElasticsearchPublisher(
            http_hosts=config.http_hosts,
            admin_hosts=config.admin_hosts,
            index=config.es_index,
            cluster_name=config.es_cluster_name,
            chunk_size=config.bulk_chunk_size
        )

        self.mongo_publisher = mongo_publisher or MongoPublisher(
            uri=config.mongo_uri,
            db_name=config.mongo_db,
            chunk_size=config.bulk_chunk_size
        )

        # Per-run dataset cache, cleared at the end of every run
        self.datasets: Dict[str, pd.DataFrame] = {}

        logger.info("Pipeline initialized successfully")

    def run(self) -> Dict[str, int]:
        """
        Run the complete load.

        Returns:
            Document counts per sink target

        Raises:
            PipelineError: On any failure, with .stage set to the failing stage
        """
        start_time = datetime.now()
        try:
            # STAGE 1: Parsing
            with self._stage(STAGE_PARSE):
                self.datasets["movies"] = self.parser.parse_movies(self.config.movies_path)
                self.datasets["ratings"] = self.parser.parse_ratings(self.config.ratings_path)
                self.datasets["tags"] = self.parser.parse_tags(self.config.tags_path)

            # STAGE 2: Tag aggregation
            with self._stage(STAGE_AGGREGATE):
                aggregated = self.aggregator.aggregate(self.datasets["tags"])

            # STAGE 3: Enrichment
            with self._stage(STAGE_ENRICH):
                self.datasets["enriched_movies"] = self.enricher.enrich(
                    self.datasets["movies"], aggregated
                )

            deadline = Deadline(self.config.timeout_seconds)
            counts = {}

            # STAGE 4: Search index
            with self._stage(STAGE_PUBLISH_SEARCH):
                counts[self.config.es_index] = self.es_publisher.publish(
                    self.datasets["enriched_movies"], deadline=deadline
                )

            # STAGE 5: Document store
            with self._stage(STAGE_PUBLISH_DOCUMENT_STORE):
                counts.update(self.mongo_publisher.publish(
                    self.datasets["movies"],
                    self.datasets["ratings"],
                    self.datasets["tags"],
                    deadline=deadline
                ))

            processing_time = (datetime.now() - start_time).total_seconds()
            logger.info(f"Pipeline complete in {processing_time:.1f}s: {counts}")
            return counts

        finally:
            self.release()

    def release(self) -> None:
        """Drop every cached dataset."""
        if self.datasets:
            logger.debug(f"Releasing cached datasets: {sorted(self.datasets)}")
        self.datasets.clear()

    @contextmanager
    def _stage(self, stage: str):
        """Log stage boundaries and tag escaping errors with the stage name."""
        logger.info(f"Stage started: {stage}")
        try:
            yield
        except PipelineError as e:
            if e.stage is None:
                e.stage = stage
            logger.error(f"Stage {e.stage} failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Stage {stage} failed: {e}")
            raise PipelineError(str(e), stage=stage) from e
        logger.info(f"Stage finished: {stage}")
