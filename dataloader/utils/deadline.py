"""
Run deadline shared by both publishers.
"""

import logging
import time
from typing import Optional

from dataloader.errors import PublishTimeoutError

logger = logging.getLogger(__name__)


class Deadline:
    """
    Fixed point in time after which no further publish step may start.

    A non-positive budget means no deadline.
    """

    def __init__(self, timeout_seconds: float, clock=time.monotonic):
        self._clock = clock
        self.timeout_seconds = timeout_seconds
        self._expires_at: Optional[float] = (
            clock() + timeout_seconds if timeout_seconds > 0 else None
        )

    @property
    def enabled(self) -> bool:
        return self._expires_at is not None

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when the deadline is disabled."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    def check(self, step: str, stage: Optional[str] = None) -> None:
        """
        Raise PublishTimeoutError if the deadline has passed.

        Args:
            step: Human-readable description of the step about to start
            stage: Pipeline stage to attach to the error
        """
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            logger.error(f"Deadline of {self.timeout_seconds}s expired before: {step}")
            raise PublishTimeoutError(
                f"Deadline of {self.timeout_seconds}s expired before: {step}",
                stage=stage,
            )
