"""
Movie data model.

One row of the movie dataset. Fields are separated by '^' in the source
file; the multi-value fields (genres, actors, directors) keep their '|'
separators and are stored as opaque strings.
"""

from dataclasses import dataclass

MOVIE_FIELD_SEPARATOR = "^"


@dataclass(frozen=True)
class Movie:
    """
    Catalog item with its descriptive metadata.
    """
    mid: int  # Movie id
    name: str  # e.g. "Toy Story (1995)"
    descri: str  # Free-text description
    timelong: str  # Runtime, e.g. "81 minutes"
    issue: str  # Release date, e.g. "March 20, 2001"
    shoot: str  # Production year
    language: str
    genres: str  # "Adventure|Animation|..."
    actors: str  # "Tom Hanks|Tim Allen|..."
    directors: str

    COLUMNS = (
        "mid", "name", "descri", "timelong", "issue",
        "shoot", "language", "genres", "actors", "directors",
    )
    DTYPES = {
        "mid": "int64",
        "name": object,
        "descri": object,
        "timelong": object,
        "issue": object,
        "shoot": object,
        "language": object,
        "genres": object,
        "actors": object,
        "directors": object,
    }

    def to_line(self) -> str:
        """Serialize back to the '^'-separated source format."""
        return MOVIE_FIELD_SEPARATOR.join(
            str(getattr(self, column)) for column in self.COLUMNS
        )
