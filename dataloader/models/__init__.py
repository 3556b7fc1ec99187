"""
Record types and configuration for the DataLoader.
"""

from dataloader.models.config import LoaderConfig
from dataloader.models.movie import Movie
from dataloader.models.rating import Rating
from dataloader.models.tag import Tag

__all__ = ["LoaderConfig", "Movie", "Rating", "Tag"]
