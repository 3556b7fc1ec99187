"""
DataFrame to document conversion shared by both publishers.
"""

import math
from typing import Dict, Iterator, List

import pandas as pd


def _is_null(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def iter_documents(frame: pd.DataFrame, drop_nulls: bool = False) -> Iterator[Dict]:
    """
    Yield one plain dict per row with native Python values.

    Args:
        frame: Source DataFrame
        drop_nulls: Omit fields whose value is None/NaN
    """
    for record in frame.to_dict(orient="records"):
        if drop_nulls:
            record = {k: v for k, v in record.items() if not _is_null(v)}
        yield record


def chunked(documents: Iterator[Dict], size: int) -> Iterator[List[Dict]]:
    """Group documents into lists of at most `size`."""
    chunk = []
    for document in documents:
        chunk.append(document)
        if len(chunk) >= size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk
