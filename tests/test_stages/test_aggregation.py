"""
Unit tests for the Tag Aggregator.
"""

import pandas as pd
import pytest

from dataloader.errors import PipelineError
from dataloader.stages.aggregation import TAG_SEPARATOR, TagAggregator, combine_tags
from dataloader.stages.parsing import TAGS, RecordParser


def make_tags(rows):
    lines = [f"{uid},{mid},{text},{ts}" for uid, mid, text, ts in rows]
    return RecordParser().parse_lines(TAGS, lines)


def test_distinct_tags_per_movie():
    """Duplicate tag text from a second user is collapsed."""
    tags = make_tags([
        (15, 1, "dentist", 1193435061),
        (7, 1, "family", 1193435062),
        (8, 1, "dentist", 1193435063),
    ])

    aggregated = TagAggregator().aggregate(tags)

    assert len(aggregated) == 1
    combined = aggregated.iloc[0]["tags"]
    assert set(combined.split(TAG_SEPARATOR)) == {"dentist", "family"}


def test_combined_tags_are_sorted():
    assert combine_tags(["zombie", "action", "family", "action"]) == "action|family|zombie"


def test_distinctness_is_case_sensitive():
    tags = make_tags([
        (1, 5, "Dentist", 1),
        (2, 5, "dentist", 2),
    ])

    combined = TagAggregator().aggregate(tags).iloc[0]["tags"]

    assert set(combined.split(TAG_SEPARATOR)) == {"Dentist", "dentist"}


def test_one_row_per_tagged_movie():
    tags = make_tags([
        (1, 10, "space", 1),
        (1, 20, "war", 2),
        (2, 10, "classic", 3),
    ])

    aggregated = TagAggregator().aggregate(tags)
    by_movie = dict(zip(aggregated["mid"], aggregated["tags"]))

    assert list(aggregated.columns) == ["mid", "tags"]
    assert set(by_movie) == {10, 20}
    assert set(by_movie[10].split(TAG_SEPARATOR)) == {"space", "classic"}
    assert by_movie[20] == "war"


def test_empty_tags():
    aggregated = TagAggregator().aggregate(make_tags([]))

    assert aggregated.empty
    assert list(aggregated.columns) == ["mid", "tags"]
    assert str(aggregated["mid"].dtype) == "int64"


def test_missing_column():
    with pytest.raises(PipelineError, match="missing columns"):
        TagAggregator().aggregate(pd.DataFrame({"mid": [1]}))


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
