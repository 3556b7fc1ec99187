"""
Movie Enricher.

Left-joins the aggregated tags onto the movie dataset to build the
documents shipped to Elasticsearch.
"""

import logging

import pandas as pd

from dataloader.models.movie import Movie

logger = logging.getLogger(__name__)

# Field order of the search documents
ENRICHED_COLUMNS = list(Movie.COLUMNS) + ["tags"]


class MovieEnricher:
    """
    Adds the combined tag string to every movie.

    Every movie row appears exactly once in the output. Movies without tags
    get tags=None.
    """

    def enrich(self, movies: pd.DataFrame, aggregated_tags: pd.DataFrame) -> pd.DataFrame:
        """
        Left join movies with aggregated tags on mid.

        Args:
            movies: Movie DataFrame
            aggregated_tags: Output of TagAggregator.aggregate()

        Returns:
            DataFrame with ENRICHED_COLUMNS, same row count and order as movies

        Raises:
            TypeError: If the join keys have different dtypes
        """
        if movies["mid"].dtype != aggregated_tags["mid"].dtype:
            raise TypeError(
                f"Join key dtype mismatch: movies.mid is {movies['mid'].dtype}, "
                f"tags.mid is {aggregated_tags['mid'].dtype}"
            )

        enriched = movies.merge(
            aggregated_tags,
            on="mid",
            how="left",
            validate="many_to_one"
        )[ENRICHED_COLUMNS].copy()

        tags = enriched["tags"].astype(object)
        enriched["tags"] = tags.where(tags.notna(), None)

        tagged = int(enriched["tags"].notna().sum())
        logger.info(
            f"Enriched {len(enriched)} movies ({tagged} with tags, "
            f"{len(enriched) - tagged} without)"
        )
        return enriched
