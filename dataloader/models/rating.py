"""
Rating data model.

A user's numeric score for a movie. Duplicates are legal and kept.
"""

from dataclasses import dataclass

RATING_FIELD_SEPARATOR = ","


@dataclass(frozen=True)
class Rating:
    uid: int  # User id
    mid: int  # Movie id (not checked against the movie set)
    score: float  # e.g. 2.5
    timestamp: int  # Epoch seconds

    COLUMNS = ("uid", "mid", "score", "timestamp")
    DTYPES = {
        "uid": "int64",
        "mid": "int64",
        "score": "float64",
        "timestamp": "int64",
    }

    def to_line(self) -> str:
        return RATING_FIELD_SEPARATOR.join(
            str(getattr(self, column)) for column in self.COLUMNS
        )
