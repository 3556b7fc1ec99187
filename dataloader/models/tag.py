"""
Tag data model.

A free-text label a user attached to a movie.
"""

from dataclasses import dataclass

TAG_FIELD_SEPARATOR = ","


@dataclass(frozen=True)
class Tag:
    uid: int  # User id
    mid: int  # Movie id
    tag: str  # Tag text, kept verbatim (no trimming or case folding)
    timestamp: int  # Epoch seconds

    COLUMNS = ("uid", "mid", "tag", "timestamp")
    DTYPES = {
        "uid": "int64",
        "mid": "int64",
        "tag": object,
        "timestamp": "int64",
    }

    def to_line(self) -> str:
        return TAG_FIELD_SEPARATOR.join(
            str(getattr(self, column)) for column in self.COLUMNS
        )
