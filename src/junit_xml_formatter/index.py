"""In-memory index of received messages.

The EventIndex stores each message under the identifiers other messages use
to refer to it. It performs no derivation; the Query layer joins across the
index once the whole stream has been received.

Ordering rules:
    - Later messages with the same key replace earlier ones.
    - Test case attempts keep the position at which their started event was
      first received. This order becomes the row order of the report and is
      the only place where arrival order matters.
    - Step results of an attempt keep the position at which each test step
      first reported, with the latest result for that step.
"""

from __future__ import annotations

import logging

from junit_xml_formatter.lineage import Lineage, LineageResolver
from junit_xml_formatter.messages.common import (
    AstNodeId,
    PickleId,
    PickleStepId,
    TestCaseId,
    TestCaseStartedId,
    TestStepId,
)
from junit_xml_formatter.messages.document import GherkinDocument, Step
from junit_xml_formatter.messages.events import (
    Pickle,
    PickleStep,
    TestCase,
    TestCaseFinished,
    TestCaseStarted,
    TestRunFinished,
    TestRunStarted,
    TestStepFinished,
)

logger = logging.getLogger(__name__)


class EventIndex:
    """Single-writer store of all messages of one test run.

    Example:
        >>> index = EventIndex()
        >>> for message in messages:
        ...     index.ingest(message)
        >>> index.test_case_started()
        [TestCaseStarted(id='tcs-1', ...)]
    """

    def __init__(self) -> None:
        self._test_run_started: TestRunStarted | None = None
        self._test_run_finished: TestRunFinished | None = None
        self._test_case_started: dict[TestCaseStartedId, TestCaseStarted] = {}
        self._test_case_finished: dict[TestCaseStartedId, TestCaseFinished] = {}
        self._test_step_finished: dict[
            TestCaseStartedId, dict[TestStepId, TestStepFinished]
        ] = {}
        self._test_case_by_id: dict[TestCaseId, TestCase] = {}
        self._pickle_by_id: dict[PickleId, Pickle] = {}
        self._pickle_step_by_id: dict[PickleStepId, PickleStep] = {}
        self._lineage = LineageResolver()
        self._message_count = 0

    def ingest(self, message: object) -> None:
        """Store a message.

        Unrecognized message types are ignored so that newer producers can
        be consumed.

        Args:
            message: A decoded message.
        """
        self._message_count += 1

        if isinstance(message, TestStepFinished):
            steps = self._test_step_finished.setdefault(message.test_case_started_id, {})
            steps[message.test_step_id] = message
        elif isinstance(message, TestCaseStarted):
            self._test_case_started[message.id] = message
        elif isinstance(message, TestCaseFinished):
            self._test_case_finished[message.test_case_started_id] = message
        elif isinstance(message, TestCase):
            self._test_case_by_id[message.id] = message
        elif isinstance(message, Pickle):
            self._pickle_by_id[message.id] = message
            for pickle_step in message.steps:
                self._pickle_step_by_id[pickle_step.id] = pickle_step
        elif isinstance(message, GherkinDocument):
            self._lineage.add_document(message)
        elif isinstance(message, TestRunStarted):
            self._test_run_started = message
        elif isinstance(message, TestRunFinished):
            self._test_run_finished = message
        else:
            logger.debug("Ignoring message of type %s", type(message).__name__)

    @property
    def message_count(self) -> int:
        """Return the number of messages received, ignored ones included."""
        return self._message_count

    @property
    def test_run_started(self) -> TestRunStarted | None:
        """Return the test run started message, if received."""
        return self._test_run_started

    @property
    def test_run_finished(self) -> TestRunFinished | None:
        """Return the test run finished message, if received."""
        return self._test_run_finished

    def test_case_started(self) -> list[TestCaseStarted]:
        """Return all attempts in the order they were first received."""
        return list(self._test_case_started.values())

    def test_case_finished(self, test_case_started_id: TestCaseStartedId) -> TestCaseFinished | None:
        """Return the finished message of an attempt, if received."""
        return self._test_case_finished.get(test_case_started_id)

    def test_steps_finished(self, test_case_started_id: TestCaseStartedId) -> list[TestStepFinished]:
        """Return the latest result of each step of an attempt.

        Steps are ordered by the first time they reported.
        """
        return list(self._test_step_finished.get(test_case_started_id, {}).values())

    def test_case(self, test_case_id: TestCaseId) -> TestCase | None:
        """Return a test case definition by id."""
        return self._test_case_by_id.get(test_case_id)

    def pickle(self, pickle_id: PickleId) -> Pickle | None:
        """Return a pickle by id."""
        return self._pickle_by_id.get(pickle_id)

    def pickle_step(self, pickle_step_id: PickleStepId) -> PickleStep | None:
        """Return a pickle step by id."""
        return self._pickle_step_by_id.get(pickle_step_id)

    def step(self, step_id: AstNodeId) -> Step | None:
        """Return a document step by id."""
        return self._lineage.step(step_id)

    def lineage_for(self, ast_node_id: AstNodeId) -> Lineage | None:
        """Return the lineage of a scenario or examples row by id."""
        return self._lineage.lineage_for(ast_node_id)
