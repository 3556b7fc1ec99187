"""
Movie DataLoader.

Batch pipeline that parses the movie, rating and tag datasets, enriches
movies with their aggregated tags, and republishes everything into
MongoDB and Elasticsearch.
"""
