"""
Shared fixtures: in-memory stand-ins for the MongoDB and Elasticsearch clients.
"""

import itertools

import pytest

from dataloader.models.config import LoaderConfig

MOVIE_LINE = (
    "1^Toy Story (1995)^^81 minutes^March 20, 2001^1995^English^"
    "Adventure|Animation^Tom Hanks^John Lasseter"
)


class FakeInsertResult:
    def __init__(self, inserted_ids):
        self.inserted_ids = inserted_ids


class FakeCollection:
    def __init__(self, database, name):
        self.database = database
        self.name = name
        self.documents = []
        self.indexes = []
        self.insert_calls = 0

    def insert_many(self, documents):
        self.insert_calls += 1
        ids = []
        for document in documents:
            # pymongo adds _id to the inserted dicts
            document["_id"] = next(self.database.server.id_sequence)
            ids.append(document["_id"])
            self.documents.append(dict(document))
        return FakeInsertResult(ids)

    def create_index(self, keys):
        self.indexes.append(keys)
        self.database.server.operations.append(("create_index", self.name, keys[0][0]))


class FakeDatabase:
    def __init__(self, server, name):
        self.server = server
        self.name = name
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        return self.collections[name]

    def drop_collection(self, name):
        self.server.operations.append(("drop", name))
        self.collections.pop(name, None)


class FakeAdmin:
    def __init__(self, client):
        self.client = client

    def command(self, name):
        return {"ok": 1.0}


class FakeMongoClient:
    def __init__(self, server, uri, options):
        self.server = server
        self.uri = uri
        self.options = options
        self.closed = False
        self.admin = FakeAdmin(self)

    def __getitem__(self, name):
        if name not in self.server.databases:
            self.server.databases[name] = FakeDatabase(self.server, name)
        return self.server.databases[name]

    def close(self):
        self.closed = True


class FakeMongoServer:
    """State shared by every client created through `client_factory`."""

    def __init__(self):
        self.databases = {}
        self.clients = []
        self.operations = []
        self.id_sequence = itertools.count(1)

    def client_factory(self, uri, **options):
        client = FakeMongoClient(self, uri, options)
        self.clients.append(client)
        return client


class FakeIndices:
    def __init__(self, cluster):
        self.cluster = cluster

    def exists(self, index):
        return index in self.cluster.indices

    def delete(self, index):
        self.cluster.operations.append(("delete", index))
        del self.cluster.indices[index]

    def create(self, index):
        assert index not in self.cluster.indices, "index already exists"
        self.cluster.operations.append(("create", index))
        self.cluster.indices[index] = {}

    def refresh(self, index):
        self.cluster.operations.append(("refresh", index))


class FakeElasticsearch:
    def __init__(self, cluster, hosts):
        self.cluster = cluster
        self.hosts = hosts
        self.closed = False
        self.indices = FakeIndices(cluster)
        self.request_timeouts = []

    def info(self):
        return {"cluster_name": self.cluster.cluster_name}

    def options(self, request_timeout=None):
        self.request_timeouts.append(request_timeout)
        return self

    def close(self):
        self.closed = True


class FakeElasticsearchCluster:
    def __init__(self, cluster_name="es-cluster"):
        self.cluster_name = cluster_name
        self.indices = {}
        self.clients = []
        self.operations = []

    def client_factory(self, hosts):
        client = FakeElasticsearch(self, hosts)
        self.clients.append(client)
        return client

    def bulk(self, client, actions, chunk_size=500):
        """Replacement for elasticsearch.helpers.bulk."""
        count = 0
        for action in actions:
            client.cluster.indices[action["_index"]][action["_id"]] = action["_source"]
            count += 1
        client.cluster.operations.append(("bulk", count))
        return count, []


@pytest.fixture
def mongo_server():
    return FakeMongoServer()


@pytest.fixture
def es_cluster(monkeypatch):
    cluster = FakeElasticsearchCluster()
    monkeypatch.setattr("dataloader.publishers.es_publisher.bulk", cluster.bulk)
    return cluster


@pytest.fixture
def dataset_files(tmp_path):
    """The three input files for a two-movie catalog."""
    movies = tmp_path / "movies.csv"
    movies.write_text(
        MOVIE_LINE + "\n"
        "2^Jumanji (1995)^A board game^104 minutes^May 18, 2000^1995^English ^"
        "Adventure|Children^Robin Williams|Kirsten Dunst^Joe Johnston\n",
        encoding="utf-8"
    )
    ratings = tmp_path / "ratings.csv"
    ratings.write_text(
        "1,1,2.5,1260759144\n"
        "1,2,3.0,1260759179\n"
        "2,1,4.0,1260759182\n",
        encoding="utf-8"
    )
    tags = tmp_path / "tags.csv"
    tags.write_text(
        "15,1,dentist,1193435061\n"
        "7,1,family,1193435062\n",
        encoding="utf-8"
    )
    return {"movies": str(movies), "ratings": str(ratings), "tags": str(tags)}


@pytest.fixture
def loader_config(dataset_files):
    return LoaderConfig(
        movies_path=dataset_files["movies"],
        ratings_path=dataset_files["ratings"],
        tags_path=dataset_files["tags"],
        parallelism=1,
        mongo_uri="mongodb://localhost:27017/recommender",
        mongo_db="recommender",
        es_http_hosts="localhost:9200",
        es_admin_hosts="localhost:9200",
        es_index="recommender",
        es_cluster_name="es-cluster",
        timeout_seconds=0,
    )
