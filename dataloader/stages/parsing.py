"""
Record Parser.

Turns raw text lines of the movie, rating and tag datasets into typed
records and loads them into pandas DataFrames. Malformed input is fatal:
the first bad line aborts the run with its line number.
"""

import logging
import math
from concurrent.futures import ProcessPoolExecutor
from dataclasses import astuple
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

import pandas as pd

from dataloader.errors import ParseError
from dataloader.models.movie import Movie, MOVIE_FIELD_SEPARATOR
from dataloader.models.rating import Rating, RATING_FIELD_SEPARATOR
from dataloader.models.tag import Tag, TAG_FIELD_SEPARATOR

logger = logging.getLogger(__name__)

MOVIES = "movies"
RATINGS = "ratings"
TAGS = "tags"


def _split(dataset: str, line_number: int, line: str, separator: str, count: int) -> List[str]:
    fields = line.split(separator)
    if len(fields) != count:
        raise ParseError(
            dataset, line_number, line,
            f"expected {count} '{separator}'-separated fields, got {len(fields)}"
        )
    return fields


def _to_int(dataset: str, line_number: int, line: str, name: str, value: str) -> int:
    # int() also accepts digit separators such as "1_0"
    if "_" in value:
        raise ParseError(dataset, line_number, line, f"{name} is not an integer: {value!r}")
    try:
        return int(value)
    except ValueError:
        raise ParseError(dataset, line_number, line, f"{name} is not an integer: {value!r}")


def _to_float(dataset: str, line_number: int, line: str, name: str, value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise ParseError(dataset, line_number, line, f"{name} is not a number: {value!r}")
    if "_" in value or not math.isfinite(number):
        raise ParseError(dataset, line_number, line, f"{name} is not a finite number: {value!r}")
    return number


def parse_movie(line: str, line_number: int = 1) -> Movie:
    """Parse one '^'-separated movie line. Every field is stripped."""
    fields = [
        f.strip() for f in _split(MOVIES, line_number, line, MOVIE_FIELD_SEPARATOR, 10)
    ]
    return Movie(
        _to_int(MOVIES, line_number, line, "mid", fields[0]),
        *fields[1:]
    )


def parse_rating(line: str, line_number: int = 1) -> Rating:
    """Parse one 'uid,mid,score,timestamp' line."""
    uid, mid, score, timestamp = _split(RATINGS, line_number, line, RATING_FIELD_SEPARATOR, 4)
    return Rating(
        uid=_to_int(RATINGS, line_number, line, "uid", uid),
        mid=_to_int(RATINGS, line_number, line, "mid", mid),
        score=_to_float(RATINGS, line_number, line, "score", score),
        timestamp=_to_int(RATINGS, line_number, line, "timestamp", timestamp),
    )


def parse_tag(line: str, line_number: int = 1) -> Tag:
    """Parse one 'uid,mid,tag,timestamp' line. Tag text is kept verbatim."""
    uid, mid, text, timestamp = _split(TAGS, line_number, line, TAG_FIELD_SEPARATOR, 4)
    return Tag(
        uid=_to_int(TAGS, line_number, line, "uid", uid),
        mid=_to_int(TAGS, line_number, line, "mid", mid),
        tag=text,
        timestamp=_to_int(TAGS, line_number, line, "timestamp", timestamp),
    )


PARSERS: Dict[str, Callable] = {
    MOVIES: parse_movie,
    RATINGS: parse_rating,
    TAGS: parse_tag,
}

RECORD_TYPES = {
    MOVIES: Movie,
    RATINGS: Rating,
    TAGS: Tag,
}


def parse_partition(dataset: str, first_line_number: int, lines: Sequence[str]) -> List[tuple]:
    """
    Parse a contiguous slice of a dataset.

    Runs inside worker processes, so it returns plain tuples and takes the
    dataset name instead of a parser callable.
    """
    parser = PARSERS[dataset]
    rows = []
    for offset, line in enumerate(lines):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        rows.append(astuple(parser(line, first_line_number + offset)))
    return rows


def _partition(lines: List[str], partitions: int) -> List[Tuple[int, List[str]]]:
    size = max(1, math.ceil(len(lines) / partitions))
    return [
        (start + 1, lines[start:start + size])
        for start in range(0, len(lines), size)
    ]


class RecordParser:
    """
    Parses the three input datasets into typed DataFrames.

    With parallelism > 1 the lines are split into contiguous partitions and
    parsed in worker processes; results are concatenated in input order.
    """

    def __init__(self, parallelism: int = 1):
        """
        Initialize record parser.

        Args:
            parallelism: Number of worker processes (1 = parse in-process)
        """
        self.parallelism = max(1, parallelism)
        logger.info(f"Initialized RecordParser with parallelism={self.parallelism}")

    def parse_lines(self, dataset: str, lines: Iterable[str]) -> pd.DataFrame:
        """
        Parse raw lines of a dataset into a DataFrame.

        Args:
            dataset: One of "movies", "ratings", "tags"
            lines: Raw text lines (line terminators allowed)

        Returns:
            DataFrame with the record type's columns and dtypes

        Raises:
            ParseError: On the first malformed line
        """
        if dataset not in PARSERS:
            raise ValueError(f"Unknown dataset: {dataset}")

        lines = list(lines)
        if self.parallelism == 1 or len(lines) < 2:
            rows = parse_partition(dataset, 1, lines)
        else:
            rows = []
            partitions = _partition(lines, self.parallelism)
            with ProcessPoolExecutor(max_workers=self.parallelism) as executor:
                futures = [
                    executor.submit(parse_partition, dataset, first, chunk)
                    for first, chunk in partitions
                ]
                # Results are consumed in submission order; the first failing
                # partition in input order raises
                for future in futures:
                    rows.extend(future.result())

        record_type = RECORD_TYPES[dataset]
        frame = pd.DataFrame(rows, columns=list(record_type.COLUMNS)).astype(record_type.DTYPES)

        logger.info(f"Parsed {len(frame)} {dataset} records")
        return frame

    def parse_file(self, dataset: str, path: str) -> pd.DataFrame:
        """Read a UTF-8 dataset file and parse it."""
        logger.info(f"Loading {dataset} from {path}")
        with open(path, "r", encoding="utf-8") as f:
            lines = f.readlines()
        return self.parse_lines(dataset, lines)

    def parse_movies(self, path: str) -> pd.DataFrame:
        return self.parse_file(MOVIES, path)

    def parse_ratings(self, path: str) -> pd.DataFrame:
        return self.parse_file(RATINGS, path)

    def parse_tags(self, path: str) -> pd.DataFrame:
        return self.parse_file(TAGS, path)
