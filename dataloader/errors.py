"""
Error taxonomy for the data loading pipeline.

Every error carries the stage that failed so the CLI can report it.
"""

from typing import Optional

STAGE_PARSE = "parse"
STAGE_AGGREGATE = "aggregate"
STAGE_ENRICH = "enrich"
STAGE_PUBLISH_SEARCH = "publish-search"
STAGE_PUBLISH_DOCUMENT_STORE = "publish-document-store"


class PipelineError(Exception):
    """Base class for all fatal pipeline errors."""

    default_stage: Optional[str] = None

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage


class ConfigurationError(PipelineError):
    """Configuration value that cannot be used (e.g. malformed host list)."""


class ParseError(PipelineError):
    """A line did not have the expected field count or a field failed conversion."""

    default_stage = STAGE_PARSE

    def __init__(self, dataset: str, line_number: int, line: str, reason: str):
        super().__init__(
            f"{dataset} line {line_number}: {reason} (line: {line!r})"
        )
        self.dataset = dataset
        self.line_number = line_number
        self.line = line
        self.reason = reason

    def __reduce__(self):
        # Worker processes send this back through pickle
        return (
            self.__class__,
            (self.dataset, self.line_number, self.line, self.reason),
        )


class StoreConnectionError(PipelineError):
    """The document store or search engine could not be reached."""


class PublishTimeoutError(StoreConnectionError):
    """The run deadline expired before a publish step could start."""


class IndexOperationError(PipelineError):
    """Dropping or creating a collection, index or search index failed."""


class BulkWriteFailedError(PipelineError):
    """A bulk write reported failed documents."""
