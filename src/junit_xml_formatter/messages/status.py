"""Test step result status and its severity order.

The status set and order follow the Cucumber messages protocol. Severity is
held in an explicit table rather than derived from declaration order, so the
aggregation policy in the query layer can be read (and tested) on its own.

Severity, least to most severe:
    UNKNOWN < PASSED < SKIPPED < PENDING < UNDEFINED < AMBIGUOUS < FAILED
"""

from __future__ import annotations

from enum import Enum


class TestStepResultStatus(Enum):
    """Outcome of a single test step.

    Attributes:
        UNKNOWN: The step produced no meaningful status.
        PASSED: The step ran successfully.
        SKIPPED: The step was not run because an earlier step did not pass,
            or the step asked to be skipped.
        PENDING: The step definition is a placeholder.
        UNDEFINED: No step definition matched the step text.
        AMBIGUOUS: More than one step definition matched the step text.
        FAILED: The step raised an error.
    """

    UNKNOWN = "UNKNOWN"
    PASSED = "PASSED"
    SKIPPED = "SKIPPED"
    PENDING = "PENDING"
    UNDEFINED = "UNDEFINED"
    AMBIGUOUS = "AMBIGUOUS"
    FAILED = "FAILED"

    @property
    def severity(self) -> int:
        """Return the position of this status in the severity order."""
        return SEVERITY[self]

    @property
    def label(self) -> str:
        """Return the lower-cased status name used in reports."""
        return self.value.lower()


SEVERITY: dict[TestStepResultStatus, int] = {
    TestStepResultStatus.UNKNOWN: 0,
    TestStepResultStatus.PASSED: 1,
    TestStepResultStatus.SKIPPED: 2,
    TestStepResultStatus.PENDING: 3,
    TestStepResultStatus.UNDEFINED: 4,
    TestStepResultStatus.AMBIGUOUS: 5,
    TestStepResultStatus.FAILED: 6,
}
