"""Shared fixtures for unit tests.

MessageStreamBuilder produces consistent message streams for a single
feature file: a GherkinDocument, its pickles and test cases, and the
execution messages of individual attempts.
"""

from __future__ import annotations

import io
import itertools
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence, Union

import pytest

from junit_xml_formatter.config import FormatterConfig
from junit_xml_formatter.formatter import MessagesToJunitXmlWriter
from junit_xml_formatter.messages import (
    Examples,
    Feature,
    GherkinDocument,
    Message,
    Pickle,
    PickleStep,
    Rule,
    Scenario,
    Step,
    TableRow,
    TestCase,
    TestCaseFinished,
    TestCaseStarted,
    TestStep,
    TestStepFinished,
    TestStepResult,
    TestStepResultStatus,
    Timestamp,
)

StepOutcome = Union[TestStepResultStatus, TestStepResult]


@dataclass(frozen=True)
class Compiled:
    """A pickle together with the test case that runs it."""

    pickle: Pickle
    test_case: TestCase


class MessageStreamBuilder:
    """Builds messages for one feature file with generated ids.

    Example:
        >>> builder = MessageStreamBuilder()
        >>> compiled = builder.scenario("Eating cucumbers")
        >>> messages = [*builder.definitions(), *builder.attempt(compiled, [PASSED])]
    """

    def __init__(self, feature_name: str = "Eating", uri: str = "features/eating.feature") -> None:
        self.feature_name = feature_name
        self.uri = uri
        self._ids = itertools.count(1)
        self._entries: list[Scenario | str] = []
        self._rule_ids: dict[str, str] = {}
        self._rule_children: dict[str, list[Scenario]] = {}
        self._compiled: list[Compiled] = []

    def next_id(self) -> str:
        return str(next(self._ids))

    def scenario(
        self,
        name: str,
        steps: Sequence[tuple[str, str]] = (("Given ", "a step"),),
        rule: str | None = None,
        hooks: int = 0,
    ) -> Compiled:
        """Add a scenario and compile it into a pickle and test case.

        Args:
            name: Scenario name.
            steps: (keyword, text) pairs.
            rule: Name of the enclosing rule, if any.
            hooks: Number of before hooks in the test case.
        """
        ast_steps = self._steps(steps)
        scenario = Scenario(id=self.next_id(), name=name, steps=ast_steps)
        self._add(scenario, rule)
        return self._compile(name, (scenario.id,), ast_steps, hooks)

    def outline(
        self,
        name: str,
        examples: Sequence[tuple[str, Sequence[str]]],
        steps: Sequence[tuple[str, str]] = (("Given ", "a step"),),
    ) -> list[Compiled]:
        """Add a scenario outline and compile one pickle per examples row.

        Args:
            name: Scenario outline name.
            examples: (examples name, pickle names of its rows) pairs.
            steps: (keyword, text) pairs.

        Returns:
            The compiled rows, in document order.
        """
        ast_steps = self._steps(steps)
        blocks = []
        for examples_name, pickle_names in examples:
            rows = tuple(TableRow(id=self.next_id(), cells=(pickle_name,)) for pickle_name in pickle_names)
            blocks.append(Examples(id=self.next_id(), name=examples_name, table_body=rows))
        scenario = Scenario(id=self.next_id(), name=name, steps=ast_steps, examples=tuple(blocks))
        self._add(scenario, None)

        compiled = []
        for block, (_, pickle_names) in zip(blocks, examples):
            for row, pickle_name in zip(block.table_body, pickle_names):
                compiled.append(self._compile(pickle_name, (scenario.id, row.id), ast_steps, 0))
        return compiled

    def document(self) -> GherkinDocument:
        children = []
        for entry in self._entries:
            if isinstance(entry, Scenario):
                children.append(entry)
            else:
                children.append(
                    Rule(
                        id=self._rule_ids[entry],
                        name=entry,
                        children=tuple(self._rule_children[entry]),
                    )
                )
        return GherkinDocument(
            uri=self.uri,
            feature=Feature(name=self.feature_name, children=tuple(children)),
        )

    def definitions(self) -> list[Message]:
        """Return the document followed by every pickle and test case."""
        messages: list[Message] = [self.document()]
        for compiled in self._compiled:
            messages.append(compiled.pickle)
            messages.append(compiled.test_case)
        return messages

    def attempt(
        self,
        compiled: Compiled,
        outcomes: Iterable[StepOutcome],
        start: int = 0,
        end: int | None = None,
        attempt_id: str | None = None,
        attempt: int = 0,
    ) -> list[Message]:
        """Return the execution messages of one attempt.

        Args:
            compiled: The test case to run.
            outcomes: Result of each test step, hooks included, in order.
                Fewer outcomes than steps leaves the rest unreported.
            start: Start time in seconds since the epoch.
            end: Finish time in seconds, or None to leave the attempt
                unfinished.
            attempt_id: Attempt id; generated if None.
            attempt: Retry counter.
        """
        started_id = attempt_id or f"attempt-{self.next_id()}"
        messages: list[Message] = [
            TestCaseStarted(
                id=started_id,
                test_case_id=compiled.test_case.id,
                timestamp=Timestamp(start),
                attempt=attempt,
            )
        ]
        for test_step, outcome in zip(compiled.test_case.test_steps, outcomes):
            result = outcome if isinstance(outcome, TestStepResult) else TestStepResult(status=outcome)
            messages.append(
                TestStepFinished(
                    test_case_started_id=started_id,
                    test_step_id=test_step.id,
                    test_step_result=result,
                    timestamp=Timestamp(start),
                )
            )
        if end is not None:
            messages.append(TestCaseFinished(test_case_started_id=started_id, timestamp=Timestamp(end)))
        return messages

    def _steps(self, steps: Sequence[tuple[str, str]]) -> tuple[Step, ...]:
        return tuple(Step(id=self.next_id(), keyword=keyword, text=text) for keyword, text in steps)

    def _add(self, scenario: Scenario, rule: str | None) -> None:
        if rule is None:
            self._entries.append(scenario)
            return
        if rule not in self._rule_ids:
            self._rule_ids[rule] = self.next_id()
            self._rule_children[rule] = []
            self._entries.append(rule)
        self._rule_children[rule].append(scenario)

    def _compile(
        self,
        name: str,
        ast_node_ids: tuple[str, ...],
        ast_steps: tuple[Step, ...],
        hooks: int,
    ) -> Compiled:
        pickle_steps = tuple(
            PickleStep(id=self.next_id(), text=step.text, ast_node_ids=(step.id,)) for step in ast_steps
        )
        pickle = Pickle(
            id=self.next_id(),
            uri=self.uri,
            name=name,
            ast_node_ids=ast_node_ids,
            steps=pickle_steps,
        )
        test_steps = [TestStep(id=self.next_id(), hook_id=f"hook-{i}") for i in range(hooks)]
        test_steps.extend(TestStep(id=self.next_id(), pickle_step_id=step.id) for step in pickle_steps)
        compiled = Compiled(
            pickle=pickle,
            test_case=TestCase(id=self.next_id(), pickle_id=pickle.id, test_steps=tuple(test_steps)),
        )
        self._compiled.append(compiled)
        return compiled


@pytest.fixture
def builder() -> MessageStreamBuilder:
    """Return a builder for the "Eating" feature."""
    return MessageStreamBuilder()


@pytest.fixture
def render() -> Callable[..., str]:
    """Return a function rendering messages to a JUnit XML string."""

    def _render(messages: Iterable[object], config: FormatterConfig | None = None) -> str:
        out = io.StringIO()
        writer = MessagesToJunitXmlWriter(out, config)
        for message in messages:
            writer.write(message)
        writer.close()
        return out.getvalue()

    return _render
