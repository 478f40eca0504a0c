"""Derived facts about a test run.

The Query joins messages stored in an EventIndex by identifier. Because
every answer is computed by lookup against the complete index, the answers
do not depend on how messages of concurrently running test cases were
interleaved in the stream.

Lookups come in two flavours:
    find_*: Return None when a message is missing.
    require_*: Raise ConsistencyError when a message is missing.

Missing optional data is resolved with fixed defaults: zero durations when a
start or finish is missing, and a passed result for an attempt without any
step results.
"""

from __future__ import annotations

import logging

from junit_xml_formatter.errors import ConsistencyError
from junit_xml_formatter.index import EventIndex
from junit_xml_formatter.lineage import Lineage
from junit_xml_formatter.messages.common import Duration, Timestamp
from junit_xml_formatter.messages.document import Step
from junit_xml_formatter.messages.events import (
    Pickle,
    PickleStep,
    TestCase,
    TestCaseStarted,
    TestStep,
    TestStepResult,
)
from junit_xml_formatter.messages.status import TestStepResultStatus
from junit_xml_formatter.naming import NamingStrategy

logger = logging.getLogger(__name__)

# By convention a scenario without steps passes.
SCENARIO_WITH_NO_STEPS = TestStepResult(
    status=TestStepResultStatus.PASSED,
    duration=Duration(),
)


class Query:
    """Read-only questions about the messages in an EventIndex.

    The index must not change while a report is being produced from it.

    Args:
        index: The populated message index.
    """

    def __init__(self, index: EventIndex) -> None:
        self._index = index

    # -------------------------------------------------------------------------
    # Test run
    # -------------------------------------------------------------------------

    def run_started_at(self) -> Timestamp | None:
        """Return when the test run started, if known."""
        started = self._index.test_run_started
        return started.timestamp if started is not None else None

    def run_duration(self) -> Duration:
        """Return the duration of the test run.

        Returns:
            Finish minus start, or zero if either message is missing.
        """
        started = self._index.test_run_started
        finished = self._index.test_run_finished
        if started is None or finished is None:
            return Duration()
        return Duration.between(started.timestamp, finished.timestamp)

    # -------------------------------------------------------------------------
    # Attempts
    # -------------------------------------------------------------------------

    def attempts(self) -> list[TestCaseStarted]:
        """Return all attempts in the order they were first received."""
        return self._index.test_case_started()

    def attempt_count(self) -> int:
        """Return the number of attempts."""
        return len(self._index.test_case_started())

    def attempt_duration(self, attempt: TestCaseStarted) -> Duration:
        """Return the duration of an attempt.

        Args:
            attempt: The attempt.

        Returns:
            Finish minus start, or zero if the attempt never finished.
        """
        finished = self._index.test_case_finished(attempt.id)
        if finished is None:
            return Duration()
        return Duration.between(attempt.timestamp, finished.timestamp)

    def find_test_case(self, attempt: TestCaseStarted) -> TestCase | None:
        """Return the test case definition of an attempt."""
        return self._index.test_case(attempt.test_case_id)

    def require_test_case(self, attempt: TestCaseStarted) -> TestCase:
        """Return the test case definition of an attempt.

        Raises:
            ConsistencyError: If the definition was never received.
        """
        test_case = self.find_test_case(attempt)
        if test_case is None:
            raise ConsistencyError("TestCase", attempt.test_case_id, f"attempt {attempt.id}")
        return test_case

    def find_pickle(self, attempt: TestCaseStarted) -> Pickle | None:
        """Return the pickle an attempt runs."""
        test_case = self.find_test_case(attempt)
        if test_case is None:
            return None
        return self._index.pickle(test_case.pickle_id)

    def require_pickle(self, attempt: TestCaseStarted) -> Pickle:
        """Return the pickle an attempt runs.

        Raises:
            ConsistencyError: If the test case or pickle was never received.
        """
        test_case = self.require_test_case(attempt)
        pickle = self._index.pickle(test_case.pickle_id)
        if pickle is None:
            raise ConsistencyError("Pickle", test_case.pickle_id, f"test case {test_case.id}")
        return pickle

    def find_lineage(self, pickle: Pickle) -> Lineage | None:
        """Return the document ancestry of a pickle.

        The most specific node is the last of the pickle's AST node ids: the
        examples row for an example, otherwise the scenario.
        """
        if not pickle.ast_node_ids:
            return None
        return self._index.lineage_for(pickle.ast_node_ids[-1])

    # -------------------------------------------------------------------------
    # Steps and results
    # -------------------------------------------------------------------------

    def step_outcomes(self, attempt: TestCaseStarted) -> list[TestStepResult]:
        """Return the latest result of every step of an attempt, hooks included."""
        return [
            finished.test_step_result
            for finished in self._index.test_steps_finished(attempt.id)
        ]

    def most_severe_outcome(self, attempt: TestCaseStarted) -> TestStepResult:
        """Return the most severe step result of an attempt.

        Of several results with equal severity the last one folded wins, as
        they may carry different messages.

        Args:
            attempt: The attempt.

        Returns:
            The most severe result, or a passed result with zero duration if
            the attempt has no step results.
        """
        most_severe: TestStepResult | None = None
        for result in self.step_outcomes(attempt):
            if most_severe is None or result.status.severity >= most_severe.status.severity:
                most_severe = result
        if most_severe is None:
            return SCENARIO_WITH_NO_STEPS
        return most_severe

    def status_counts(self) -> dict[TestStepResultStatus, int]:
        """Count attempts by their most severe status.

        Returns:
            A count for every status, zero included.
        """
        counts = {status: 0 for status in TestStepResultStatus}
        for attempt in self.attempts():
            counts[self.most_severe_outcome(attempt).status] += 1
        return counts

    def steps_and_outcomes(self, attempt: TestCaseStarted) -> list[tuple[str, str]]:
        """Render the reported steps of an attempt with their outcome.

        Only steps that reported a result are listed, in the order they first
        reported. Hooks are left out. An attempt that was interrupted before
        its steps ran lists nothing.

        Args:
            attempt: The attempt.

        Returns:
            (step text, status label) pairs, e.g. ("Given a step", "passed").

        Raises:
            ConsistencyError: If a result names a test step the test case does
                not define, or a step's pickle step or document step is
                missing.
        """
        test_case = self.require_test_case(attempt)
        test_steps = {test_step.id: test_step for test_step in test_case.test_steps}
        rendered: list[tuple[str, str]] = []
        for finished in self._index.test_steps_finished(attempt.id):
            test_step = test_steps.get(finished.test_step_id)
            if test_step is None:
                raise ConsistencyError("TestStep", finished.test_step_id, f"test case {test_case.id}")
            if test_step.is_hook:
                continue
            rendered.append(
                (self._render_step_text(test_step), finished.test_step_result.status.label)
            )
        return rendered

    def _render_step_text(self, test_step: TestStep) -> str:
        pickle_step = self._index.pickle_step(test_step.pickle_step_id or "")
        if pickle_step is None:
            raise ConsistencyError(
                "PickleStep", test_step.pickle_step_id or "", f"test step {test_step.id}"
            )
        step = self._require_step(pickle_step)
        return step.keyword + pickle_step.text

    def _require_step(self, pickle_step: PickleStep) -> Step:
        if not pickle_step.ast_node_ids:
            raise ConsistencyError("Step", "", f"pickle step {pickle_step.id} has no AST node ids")
        step_id = pickle_step.ast_node_ids[0]
        step = self._index.step(step_id)
        if step is None:
            raise ConsistencyError("Step", step_id, f"pickle step {pickle_step.id}")
        return step

    # -------------------------------------------------------------------------
    # Names
    # -------------------------------------------------------------------------

    def display_name(self, attempt: TestCaseStarted, strategy: NamingStrategy) -> str:
        """Return the test name of an attempt.

        Args:
            attempt: The attempt.
            strategy: How to render the name from the lineage.

        Returns:
            The rendered name, or the pickle name if the pickle's document
            nodes are unknown.

        Raises:
            ConsistencyError: If the test case or pickle was never received.
        """
        pickle = self.require_pickle(attempt)
        lineage = self.find_lineage(pickle)
        if lineage is None:
            logger.debug("No lineage for pickle %s, using its name", pickle.id)
            return pickle.name
        return strategy.reduce(lineage, pickle)

    def class_name(self, attempt: TestCaseStarted) -> str:
        """Return the class name of an attempt.

        Returns:
            The feature name, or the pickle's uri if the feature is unknown.

        Raises:
            ConsistencyError: If the test case or pickle was never received.
        """
        pickle = self.require_pickle(attempt)
        lineage = self.find_lineage(pickle)
        if lineage is None:
            return pickle.uri
        return lineage.feature.name
