"""
Loader configuration value object.

Built once before the run starts and passed into the orchestrator.
"""

import re
from dataclasses import dataclass
from typing import List, Tuple

import config.settings as settings
from dataloader.errors import ConfigurationError

HOST_PORT_PATTERN = re.compile(r"(.+):(\d+)")


def parse_host_list(hosts: str) -> List[Tuple[str, int]]:
    """
    Parse a ';'-separated list of host:port pairs.

    Raises:
        ConfigurationError: If the list is empty or an entry is not host:port
    """
    pairs = []
    for entry in hosts.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        match = HOST_PORT_PATTERN.fullmatch(entry)
        if not match:
            raise ConfigurationError(f"Invalid host entry '{entry}' (expected host:port)")
        pairs.append((match.group(1), int(match.group(2))))

    if not pairs:
        raise ConfigurationError(f"No hosts configured in '{hosts}'")
    return pairs


@dataclass(frozen=True)
class LoaderConfig:
    """
    Immutable configuration for a single pipeline run.
    """
    movies_path: str
    ratings_path: str
    tags_path: str
    parallelism: int = 1
    mongo_uri: str = "mongodb://localhost:27017/recommender"
    mongo_db: str = "recommender"
    es_http_hosts: str = "localhost:9200"
    es_admin_hosts: str = "localhost:9200"
    es_index: str = "recommender"
    es_cluster_name: str = "es-cluster"
    timeout_seconds: float = 0.0
    bulk_chunk_size: int = 1000

    def __post_init__(self):
        if self.bulk_chunk_size < 1:
            raise ConfigurationError(
                f"Invalid bulk_chunk_size: {self.bulk_chunk_size}. Must be >= 1"
            )
        # Fail before any sink is touched
        parse_host_list(self.es_http_hosts)
        parse_host_list(self.es_admin_hosts)

    @classmethod
    def from_settings(cls) -> "LoaderConfig":
        """Create config from config/settings.py (environment-backed defaults)."""
        return cls(
            movies_path=settings.MOVIES_PATH,
            ratings_path=settings.RATINGS_PATH,
            tags_path=settings.TAGS_PATH,
            parallelism=settings.PARALLELISM,
            mongo_uri=settings.MONGO_URI,
            mongo_db=settings.MONGO_DB,
            es_http_hosts=settings.ES_HTTP_HOSTS,
            es_admin_hosts=settings.ES_ADMIN_HOSTS,
            es_index=settings.ES_INDEX,
            es_cluster_name=settings.ES_CLUSTER_NAME,
            timeout_seconds=settings.TIMEOUT_SECONDS,
            bulk_chunk_size=settings.BULK_CHUNK_SIZE,
        )

    @property
    def http_hosts(self) -> List[Tuple[str, int]]:
        return parse_host_list(self.es_http_hosts)

    @property
    def admin_hosts(self) -> List[Tuple[str, int]]:
        return parse_host_list(self.es_admin_hosts)
