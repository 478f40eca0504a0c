"""Test execution message types.

These are the messages a Cucumber implementation emits while compiling and
running a test suite. They reference each other only by identifier:

    TestCaseStarted --test_case_id--> TestCase --pickle_id--> Pickle
    TestStep --pickle_step_id--> PickleStep --ast_node_ids[0]--> Step
    Pickle --ast_node_ids[-1]--> Scenario or TableRow
    TestCaseFinished / TestStepFinished --test_case_started_id--> TestCaseStarted

Together with GherkinDocument (see document.py) they form the input of the
formatter. Any other object passed to the formatter is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from junit_xml_formatter.messages.common import (
    AstNodeId,
    Duration,
    PickleId,
    PickleStepId,
    TestCaseId,
    TestCaseStartedId,
    TestStepId,
    Timestamp,
)
from junit_xml_formatter.messages.document import GherkinDocument
from junit_xml_formatter.messages.status import TestStepResultStatus


@dataclass(frozen=True)
class ExceptionInfo:
    """An exception raised by a step.

    Attributes:
        type: Fully qualified exception type name.
        message: Exception message, if any.
        stack_trace: Rendered stack trace, if the implementation provides one.
    """

    type: str
    message: str | None = None
    stack_trace: str | None = None


@dataclass(frozen=True)
class TestStepResult:
    """Outcome of running a single test step.

    Attributes:
        status: The step status.
        duration: Time spent running the step.
        message: Free-text failure message. Older implementations put the
            stack trace here.
        exception: Structured exception, if the step raised one.
    """

    status: TestStepResultStatus
    duration: Duration = field(default_factory=Duration)
    message: str | None = None
    exception: ExceptionInfo | None = None


@dataclass(frozen=True)
class PickleStep:
    """A step of a pickle, with example values substituted into its text."""

    id: PickleStepId
    text: str
    ast_node_ids: tuple[AstNodeId, ...] = ()


@dataclass(frozen=True)
class Pickle:
    """A scenario or example row compiled into an executable unit.

    Attributes:
        id: Pickle identifier.
        uri: Location of the feature file the pickle was compiled from.
        name: Pickle name, with example values substituted.
        ast_node_ids: Originating document nodes; the scenario first and,
            for example rows, the table row last.
        steps: Steps to run, backgrounds included.
    """

    id: PickleId
    uri: str
    name: str
    ast_node_ids: tuple[AstNodeId, ...] = ()
    steps: tuple[PickleStep, ...] = ()


@dataclass(frozen=True)
class TestStep:
    """A step of a test case: either a pickle step or a hook.

    Attributes:
        id: Test step identifier.
        pickle_step_id: The pickle step this step runs, None for hooks.
        hook_id: The hook this step runs, None for pickle steps.
    """

    id: TestStepId
    pickle_step_id: PickleStepId | None = None
    hook_id: str | None = None

    @property
    def is_hook(self) -> bool:
        """Return True if this step runs a hook rather than a pickle step."""
        return self.pickle_step_id is None


@dataclass(frozen=True)
class TestCase:
    """A pickle prepared for execution: its steps plus any hooks."""

    id: TestCaseId
    pickle_id: PickleId
    test_steps: tuple[TestStep, ...] = ()


@dataclass(frozen=True)
class TestRunStarted:
    """Marks the start of a test run."""

    timestamp: Timestamp
    id: str | None = None


@dataclass(frozen=True)
class TestRunFinished:
    """Marks the end of a test run."""

    timestamp: Timestamp
    success: bool = True
    message: str | None = None


@dataclass(frozen=True)
class TestCaseStarted:
    """Marks the start of one attempt at running a test case.

    Attributes:
        id: Attempt identifier.
        test_case_id: The test case being run.
        timestamp: When the attempt started.
        attempt: 0-based retry counter.
    """

    id: TestCaseStartedId
    test_case_id: TestCaseId
    timestamp: Timestamp
    attempt: int = 0


@dataclass(frozen=True)
class TestCaseFinished:
    """Marks the end of one attempt at running a test case."""

    test_case_started_id: TestCaseStartedId
    timestamp: Timestamp
    will_be_retried: bool = False


@dataclass(frozen=True)
class TestStepFinished:
    """Reports the result of one test step within an attempt."""

    test_case_started_id: TestCaseStartedId
    test_step_id: TestStepId
    test_step_result: TestStepResult
    timestamp: Timestamp


Message = Union[
    GherkinDocument,
    Pickle,
    TestCase,
    TestRunStarted,
    TestRunFinished,
    TestCaseStarted,
    TestCaseFinished,
    TestStepFinished,
]
"""Any message understood by the formatter."""
