"""
Sink publishers for the DataLoader.

Each publisher fully replaces its target (drop, recreate, bulk write):
- MongoPublisher: Movie / Rating / Tag collections
- ElasticsearchPublisher: enriched movie index
"""
