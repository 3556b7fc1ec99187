"""
Movie DataLoader

CLI entry point for loading the movie, rating and tag datasets into
MongoDB and Elasticsearch.
"""

import argparse
import logging
import sys

from dataloader.errors import PipelineError
from dataloader.models.config import LoaderConfig
from dataloader.orchestrator import PipelineOrchestrator
import config.settings as settings


def setup_logging(log_level: str = "INFO", log_file: str = settings.LOG_FILE):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Movie DataLoader - republish movies, ratings and tags to MongoDB and Elasticsearch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load the default small dataset
  python main.py

  # Load custom files into a remote cluster
  python main.py --movies data/movies.csv --ratings data/ratings.csv \\
                 --tags data/tags.csv \\
                 --mongo-uri mongodb://BigData:27017/recommender \\
                 --es-http-hosts BigData:9200

Every option can also be set through a DATALOADER_* environment variable.
        """
    )

    parser.add_argument("--movies", default=settings.MOVIES_PATH,
                        help=f"Movie dataset path (default: {settings.MOVIES_PATH})")
    parser.add_argument("--ratings", default=settings.RATINGS_PATH,
                        help=f"Rating dataset path (default: {settings.RATINGS_PATH})")
    parser.add_argument("--tags", default=settings.TAGS_PATH,
                        help=f"Tag dataset path (default: {settings.TAGS_PATH})")
    parser.add_argument("--parallelism", type=int, default=settings.PARALLELISM,
                        help=f"Parser worker processes (default: {settings.PARALLELISM})")
    parser.add_argument("--mongo-uri", default=settings.MONGO_URI)
    parser.add_argument("--mongo-db", default=settings.MONGO_DB)
    parser.add_argument("--es-http-hosts", default=settings.ES_HTTP_HOSTS,
                        help="';'-separated host:port list for bulk writes")
    parser.add_argument("--es-admin-hosts", default=settings.ES_ADMIN_HOSTS,
                        help="';'-separated host:port list for index administration")
    parser.add_argument("--es-index", default=settings.ES_INDEX)
    parser.add_argument("--es-cluster-name", default=settings.ES_CLUSTER_NAME)
    parser.add_argument("--timeout", type=float, default=settings.TIMEOUT_SECONDS,
                        help="Publish deadline in seconds, 0 disables "
                             f"(default: {settings.TIMEOUT_SECONDS})")
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> LoaderConfig:
    return LoaderConfig(
        movies_path=args.movies,
        ratings_path=args.ratings,
        tags_path=args.tags,
        parallelism=args.parallelism,
        mongo_uri=args.mongo_uri,
        mongo_db=args.mongo_db,
        es_http_hosts=args.es_http_hosts,
        es_admin_hosts=args.es_admin_hosts,
        es_index=args.es_index,
        es_cluster_name=args.es_cluster_name,
        timeout_seconds=args.timeout,
        bulk_chunk_size=settings.BULK_CHUNK_SIZE,
    )


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        config = config_from_args(args)

        print("=" * 60)
        print("Movie DataLoader")
        print("=" * 60)
        print(f"Movies:  {config.movies_path}")
        print(f"Ratings: {config.ratings_path}")
        print(f"Tags:    {config.tags_path}")
        print(f"MongoDB: {config.mongo_uri} (db: {config.mongo_db})")
        print(f"Elasticsearch: {config.es_http_hosts} (index: {config.es_index})")
        print("=" * 60)
        print()

        logger.info("Initializing DataLoader pipeline...")
        orchestrator = PipelineOrchestrator(config)
        counts = orchestrator.run()

        print()
        print("=" * 60)
        print("✅ Load completed successfully!")
        print("=" * 60)
        for target, count in counts.items():
            print(f"{target}: {count} documents")
        print("=" * 60)

        logger.info("DataLoader completed successfully")
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user")
        print("\n⚠️  Pipeline interrupted")
        sys.exit(1)

    except PipelineError as e:
        stage = e.stage or "configuration"
        logger.error(f"Pipeline failed at stage {stage}: {e}", exc_info=True)
        print(f"\n❌ Pipeline failed at stage {stage}: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\n❌ Pipeline failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)


if __name__ == "__main__":
    main()
