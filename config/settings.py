"""
Configuration settings for the DataLoader.

Centralized defaults for input paths, store endpoints and pipeline
parameters. Every value can be overridden through a DATALOADER_* environment
variable.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = Path(os.getenv("DATALOADER_DATA_ROOT", PROJECT_ROOT / "data" / "small"))

# Input datasets
# [mid, name, descri, timelong, issue, shoot, language, genres, actors, directors]
MOVIES_PATH = os.getenv("DATALOADER_MOVIES_PATH", str(DATA_ROOT / "movies.csv"))
# [uid, mid, score, timestamp]
RATINGS_PATH = os.getenv("DATALOADER_RATINGS_PATH", str(DATA_ROOT / "ratings.csv"))
# [uid, mid, tag, timestamp]
TAGS_PATH = os.getenv("DATALOADER_TAGS_PATH", str(DATA_ROOT / "tags.csv"))

# Parallel parsing (number of worker processes, 1 = in-process)
PARALLELISM = int(os.getenv("DATALOADER_PARALLELISM", os.cpu_count() or 1))

# MongoDB
MONGO_URI = os.getenv("DATALOADER_MONGO_URI", "mongodb://localhost:27017/recommender")
MONGO_DB = os.getenv("DATALOADER_MONGO_DB", "recommender")

# Elasticsearch (';'-separated host:port lists)
ES_HTTP_HOSTS = os.getenv("DATALOADER_ES_HTTP_HOSTS", "localhost:9200")
ES_ADMIN_HOSTS = os.getenv("DATALOADER_ES_ADMIN_HOSTS", ES_HTTP_HOSTS)
ES_INDEX = os.getenv("DATALOADER_ES_INDEX", "recommender")
ES_CLUSTER_NAME = os.getenv("DATALOADER_ES_CLUSTER_NAME", "es-cluster")

# Publishing
TIMEOUT_SECONDS = float(os.getenv("DATALOADER_TIMEOUT_SECONDS", "6000"))  # 0 disables
BULK_CHUNK_SIZE = int(os.getenv("DATALOADER_BULK_CHUNK_SIZE", "1000"))

# Logging
LOG_LEVEL = os.getenv("DATALOADER_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = os.getenv("DATALOADER_LOG_FILE", "dataloader.log")
