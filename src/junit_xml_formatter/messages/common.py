"""Common types used across the message model.

Cucumber messages express points in time and elapsed time as a pair of
whole seconds and nanoseconds. This module provides those two value types
and the identifier aliases used to cross-reference messages.

Type Aliases:
    TestCaseStartedId: Identifies one attempt at running a test case.
    TestCaseId: Identifies a test case definition.
    TestStepId: Identifies a test step within a test case definition.
    PickleId: Identifies a pickle.
    PickleStepId: Identifies a pickle step.
    AstNodeId: Identifies a node of a Gherkin document.

Classes:
    Timestamp: A point in time relative to the Unix epoch.
    Duration: An elapsed time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import NewType

TestCaseStartedId = NewType("TestCaseStartedId", str)
"""Type alias for test case attempt identifiers."""

TestCaseId = NewType("TestCaseId", str)
"""Type alias for test case definition identifiers."""

TestStepId = NewType("TestStepId", str)
"""Type alias for test step identifiers."""

PickleId = NewType("PickleId", str)
"""Type alias for pickle identifiers."""

PickleStepId = NewType("PickleStepId", str)
"""Type alias for pickle step identifiers."""

AstNodeId = NewType("AstNodeId", str)
"""Type alias for Gherkin document node identifiers."""

NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MILLI = 1_000_000

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Duration:
    """An elapsed time with nanosecond precision.

    Attributes:
        seconds: Whole seconds.
        nanos: Additional nanoseconds (0 to 999,999,999).

    Example:
        >>> Duration.between(Timestamp(10), Timestamp(30)).to_millis()
        20000
    """

    seconds: int = 0
    nanos: int = 0

    @classmethod
    def from_nanos(cls, total_nanos: int) -> Duration:
        """Create a duration from a total number of nanoseconds.

        Args:
            total_nanos: Elapsed nanoseconds, may be negative.

        Returns:
            A normalized Duration.
        """
        seconds, nanos = divmod(total_nanos, NANOS_PER_SECOND)
        return cls(seconds=seconds, nanos=nanos)

    @classmethod
    def between(cls, start: Timestamp, end: Timestamp) -> Duration:
        """Return the duration from start to end.

        Args:
            start: The earlier timestamp.
            end: The later timestamp.

        Returns:
            The elapsed duration (negative if end precedes start).
        """
        return cls.from_nanos(end.unix_ns - start.unix_ns)

    @property
    def total_nanos(self) -> int:
        """Return the duration in nanoseconds."""
        return self.seconds * NANOS_PER_SECOND + self.nanos

    def to_millis(self) -> int:
        """Return the duration in whole milliseconds.

        Sub-millisecond precision is discarded.
        """
        return self.total_nanos // NANOS_PER_MILLI


@dataclass(frozen=True)
class Timestamp:
    """A point in time as seconds and nanoseconds since the Unix epoch.

    Attributes:
        seconds: Whole seconds since 1970-01-01T00:00:00Z.
        nanos: Additional nanoseconds (0 to 999,999,999).
    """

    seconds: int
    nanos: int = 0

    @property
    def unix_ns(self) -> int:
        """Return the timestamp as nanoseconds since the Unix epoch."""
        return self.seconds * NANOS_PER_SECOND + self.nanos

    def to_iso8601(self) -> str:
        """Format as an extended ISO-8601 instant in UTC.

        Fractional seconds are only written when non-zero, in groups of
        three digits (milli, micro or nano precision).

        Returns:
            A string like "1970-01-01T00:00:10Z" or "2024-01-15T14:30:52.250Z".
        """
        text = (EPOCH + timedelta(seconds=self.seconds)).strftime("%Y-%m-%dT%H:%M:%S")
        if self.nanos:
            fraction = f"{self.nanos:09d}"
            while fraction.endswith("000"):
                fraction = fraction[:-3]
            text = f"{text}.{fraction}"
        return f"{text}Z"
