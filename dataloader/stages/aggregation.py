"""
Tag Aggregator.

Collapses the tag dataset into one combined tag string per movie.
"""

import logging

import pandas as pd

from dataloader.errors import PipelineError, STAGE_AGGREGATE

logger = logging.getLogger(__name__)

# Must not collide with the '^' movie field separator
TAG_SEPARATOR = "|"

AGGREGATED_COLUMNS = ["mid", "tags"]


def combine_tags(texts) -> str:
    """Join the distinct tag texts in lexicographic order."""
    return TAG_SEPARATOR.join(sorted(set(texts)))


class TagAggregator:
    """
    Groups tags by movie id and concatenates the distinct texts.

    Distinctness is exact string equality (case-sensitive, no trimming).
    Texts are sorted so reruns produce identical output.
    """

    def aggregate(self, tags: pd.DataFrame) -> pd.DataFrame:
        """
        Aggregate tags per movie.

        Args:
            tags: Tag DataFrame with at least "mid" and "tag" columns

        Returns:
            DataFrame with columns ["mid", "tags"], one row per movie id
            that has at least one tag
        """
        missing = {"mid", "tag"} - set(tags.columns)
        if missing:
            raise PipelineError(
                f"Tag dataset is missing columns: {sorted(missing)}",
                stage=STAGE_AGGREGATE
            )

        if tags.empty:
            logger.warning("No tags to aggregate")
            return pd.DataFrame(columns=AGGREGATED_COLUMNS).astype({"mid": "int64", "tags": object})

        aggregated = (
            tags.groupby("mid", sort=True)["tag"]
            .agg(combine_tags)
            .reset_index()
            .rename(columns={"tag": "tags"})
        )

        logger.info(
            f"Aggregated {len(tags)} tags into {len(aggregated)} movies"
        )
        return aggregated[AGGREGATED_COLUMNS]
