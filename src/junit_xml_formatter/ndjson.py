"""NDJSON message decoding.

Cucumber implementations write their messages as newline-delimited JSON: one
envelope object per line, wrapping exactly one message under a camelCase key
such as "testCaseStarted". This module validates each line with Pydantic
wire models and converts it to the message dataclasses the formatter
consumes.

Envelopes the formatter has no use for (meta, source, stepDefinition, hook,
attachment, ...) are skipped, as are unknown fields within messages.

Example:
    >>> with open("messages.ndjson", encoding="utf-8") as f:
    ...     for message in read_messages(f):
    ...         writer.write(message)
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, TextIO

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from junit_xml_formatter.errors import MessageDecodeError
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
from junit_xml_formatter.messages.document import (
    Background,
    Examples,
    Feature,
    FeatureChild,
    GherkinDocument,
    Rule,
    RuleChild,
    Scenario,
    Step,
    TableRow,
)
from junit_xml_formatter.messages.events import (
    ExceptionInfo,
    Message,
    Pickle,
    PickleStep,
    TestCase,
    TestCaseFinished,
    TestCaseStarted,
    TestRunFinished,
    TestRunStarted,
    TestStep,
    TestStepFinished,
    TestStepResult,
)
from junit_xml_formatter.messages.status import TestStepResultStatus

logger = logging.getLogger(__name__)


class WireModel(BaseModel):
    """Base for wire models: camelCase keys, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# -----------------------------------------------------------------------------
# Common
# -----------------------------------------------------------------------------


class WireTimestamp(WireModel):
    seconds: int
    nanos: int = 0

    def to_timestamp(self) -> Timestamp:
        return Timestamp(seconds=self.seconds, nanos=self.nanos)


class WireDuration(WireModel):
    seconds: int = 0
    nanos: int = 0

    def to_duration(self) -> Duration:
        return Duration(seconds=self.seconds, nanos=self.nanos)


# -----------------------------------------------------------------------------
# Gherkin document
# -----------------------------------------------------------------------------


class WireStep(WireModel):
    id: str
    keyword: str
    text: str = ""

    def to_step(self) -> Step:
        return Step(id=AstNodeId(self.id), keyword=self.keyword, text=self.text)


class WireTableCell(WireModel):
    value: str = ""


class WireTableRow(WireModel):
    id: str
    cells: list[WireTableCell] = Field(default_factory=list)

    def to_row(self) -> TableRow:
        return TableRow(id=AstNodeId(self.id), cells=tuple(cell.value for cell in self.cells))


class WireExamples(WireModel):
    id: str
    name: str = ""
    table_body: list[WireTableRow] = Field(default_factory=list)

    def to_examples(self) -> Examples:
        return Examples(
            id=AstNodeId(self.id),
            name=self.name,
            table_body=tuple(row.to_row() for row in self.table_body),
        )


class WireScenario(WireModel):
    id: str
    name: str = ""
    steps: list[WireStep] = Field(default_factory=list)
    examples: list[WireExamples] = Field(default_factory=list)

    def to_scenario(self) -> Scenario:
        return Scenario(
            id=AstNodeId(self.id),
            name=self.name,
            steps=tuple(step.to_step() for step in self.steps),
            examples=tuple(examples.to_examples() for examples in self.examples),
        )


class WireBackground(WireModel):
    id: str
    name: str = ""
    steps: list[WireStep] = Field(default_factory=list)

    def to_background(self) -> Background:
        return Background(
            id=AstNodeId(self.id),
            name=self.name,
            steps=tuple(step.to_step() for step in self.steps),
        )


class WireRuleChild(WireModel):
    """A rule child: exactly one of background or scenario."""

    background: WireBackground | None = None
    scenario: WireScenario | None = None

    def to_child(self) -> RuleChild | None:
        if self.background is not None:
            return self.background.to_background()
        if self.scenario is not None:
            return self.scenario.to_scenario()
        return None


class WireRule(WireModel):
    id: str
    name: str = ""
    children: list[WireRuleChild] = Field(default_factory=list)

    def to_rule(self) -> Rule:
        children = (child.to_child() for child in self.children)
        return Rule(
            id=AstNodeId(self.id),
            name=self.name,
            children=tuple(child for child in children if child is not None),
        )


class WireFeatureChild(WireModel):
    """A feature child: exactly one of background, scenario or rule."""

    background: WireBackground | None = None
    scenario: WireScenario | None = None
    rule: WireRule | None = None

    def to_child(self) -> FeatureChild | None:
        if self.rule is not None:
            return self.rule.to_rule()
        if self.background is not None:
            return self.background.to_background()
        if self.scenario is not None:
            return self.scenario.to_scenario()
        return None


class WireFeature(WireModel):
    name: str = ""
    children: list[WireFeatureChild] = Field(default_factory=list)

    def to_feature(self) -> Feature:
        children = (child.to_child() for child in self.children)
        return Feature(
            name=self.name,
            children=tuple(child for child in children if child is not None),
        )


class WireGherkinDocument(WireModel):
    uri: str | None = None
    feature: WireFeature | None = None

    def to_message(self) -> GherkinDocument:
        return GherkinDocument(
            uri=self.uri,
            feature=self.feature.to_feature() if self.feature is not None else None,
        )


# -----------------------------------------------------------------------------
# Pickles and test cases
# -----------------------------------------------------------------------------


class WirePickleStep(WireModel):
    id: str
    text: str = ""
    ast_node_ids: list[str] = Field(default_factory=list)

    def to_pickle_step(self) -> PickleStep:
        return PickleStep(
            id=PickleStepId(self.id),
            text=self.text,
            ast_node_ids=tuple(AstNodeId(node_id) for node_id in self.ast_node_ids),
        )


class WirePickle(WireModel):
    id: str
    uri: str = ""
    name: str = ""
    ast_node_ids: list[str] = Field(default_factory=list)
    steps: list[WirePickleStep] = Field(default_factory=list)

    def to_message(self) -> Pickle:
        return Pickle(
            id=PickleId(self.id),
            uri=self.uri,
            name=self.name,
            ast_node_ids=tuple(AstNodeId(node_id) for node_id in self.ast_node_ids),
            steps=tuple(step.to_pickle_step() for step in self.steps),
        )


class WireTestStep(WireModel):
    id: str
    pickle_step_id: str | None = None
    hook_id: str | None = None

    def to_test_step(self) -> TestStep:
        return TestStep(
            id=TestStepId(self.id),
            pickle_step_id=PickleStepId(self.pickle_step_id) if self.pickle_step_id else None,
            hook_id=self.hook_id,
        )


class WireTestCase(WireModel):
    id: str
    pickle_id: str
    test_steps: list[WireTestStep] = Field(default_factory=list)

    def to_message(self) -> TestCase:
        return TestCase(
            id=TestCaseId(self.id),
            pickle_id=PickleId(self.pickle_id),
            test_steps=tuple(step.to_test_step() for step in self.test_steps),
        )


# -----------------------------------------------------------------------------
# Execution
# -----------------------------------------------------------------------------


class WireException(WireModel):
    type: str
    message: str | None = None
    stack_trace: str | None = None

    def to_exception(self) -> ExceptionInfo:
        return ExceptionInfo(type=self.type, message=self.message, stack_trace=self.stack_trace)


class WireTestStepResult(WireModel):
    status: TestStepResultStatus
    duration: WireDuration = Field(default_factory=WireDuration)
    message: str | None = None
    exception: WireException | None = None

    def to_result(self) -> TestStepResult:
        return TestStepResult(
            status=self.status,
            duration=self.duration.to_duration(),
            message=self.message,
            exception=self.exception.to_exception() if self.exception is not None else None,
        )


class WireTestRunStarted(WireModel):
    timestamp: WireTimestamp
    id: str | None = None

    def to_message(self) -> TestRunStarted:
        return TestRunStarted(timestamp=self.timestamp.to_timestamp(), id=self.id)


class WireTestRunFinished(WireModel):
    timestamp: WireTimestamp
    success: bool = True
    message: str | None = None

    def to_message(self) -> TestRunFinished:
        return TestRunFinished(
            timestamp=self.timestamp.to_timestamp(),
            success=self.success,
            message=self.message,
        )


class WireTestCaseStarted(WireModel):
    id: str
    test_case_id: str
    timestamp: WireTimestamp
    attempt: int = 0

    def to_message(self) -> TestCaseStarted:
        return TestCaseStarted(
            id=TestCaseStartedId(self.id),
            test_case_id=TestCaseId(self.test_case_id),
            timestamp=self.timestamp.to_timestamp(),
            attempt=self.attempt,
        )


class WireTestCaseFinished(WireModel):
    test_case_started_id: str
    timestamp: WireTimestamp
    will_be_retried: bool = False

    def to_message(self) -> TestCaseFinished:
        return TestCaseFinished(
            test_case_started_id=TestCaseStartedId(self.test_case_started_id),
            timestamp=self.timestamp.to_timestamp(),
            will_be_retried=self.will_be_retried,
        )


class WireTestStepFinished(WireModel):
    test_case_started_id: str
    test_step_id: str
    test_step_result: WireTestStepResult
    timestamp: WireTimestamp

    def to_message(self) -> TestStepFinished:
        return TestStepFinished(
            test_case_started_id=TestCaseStartedId(self.test_case_started_id),
            test_step_id=TestStepId(self.test_step_id),
            test_step_result=self.test_step_result.to_result(),
            timestamp=self.timestamp.to_timestamp(),
        )


# -----------------------------------------------------------------------------
# Envelope
# -----------------------------------------------------------------------------


class Envelope(WireModel):
    """One NDJSON line. At most one of the fields is set."""

    gherkin_document: WireGherkinDocument | None = None
    pickle: WirePickle | None = None
    test_case: WireTestCase | None = None
    test_run_started: WireTestRunStarted | None = None
    test_run_finished: WireTestRunFinished | None = None
    test_case_started: WireTestCaseStarted | None = None
    test_case_finished: WireTestCaseFinished | None = None
    test_step_finished: WireTestStepFinished | None = None

    def messages(self) -> list[Message]:
        """Return the converted messages this envelope carries."""
        wrapped = (
            self.gherkin_document,
            self.pickle,
            self.test_case,
            self.test_run_started,
            self.test_run_finished,
            self.test_case_started,
            self.test_case_finished,
            self.test_step_finished,
        )
        return [item.to_message() for item in wrapped if item is not None]


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"{location}: {first['msg']}"
    return str(first["msg"])


def decode_line(line: str, line_number: int) -> Message | None:
    """Decode one NDJSON line.

    Args:
        line: The JSON text of one envelope.
        line_number: 1-based line number, for error messages.

    Returns:
        The message, or None for blank lines and envelopes the formatter
        does not consume.

    Raises:
        MessageDecodeError: If the line is not valid JSON, is not an
            envelope, or wraps more than one message.
    """
    if not line.strip():
        return None
    try:
        envelope = Envelope.model_validate_json(line)
    except ValidationError as e:
        raise MessageDecodeError(line_number, _describe(e)) from e

    messages = envelope.messages()
    if not messages:
        logger.debug("Skipping envelope on line %d", line_number)
        return None
    if len(messages) > 1:
        raise MessageDecodeError(line_number, "envelope wraps more than one message")
    return messages[0]


def iter_messages(lines: Iterable[str]) -> Iterator[Message]:
    """Decode NDJSON lines into messages.

    Args:
        lines: Lines of NDJSON text, with or without line endings.

    Yields:
        Decoded messages in input order.

    Raises:
        MessageDecodeError: On the first invalid line.
    """
    for line_number, line in enumerate(lines, start=1):
        message = decode_line(line, line_number)
        if message is not None:
            yield message


def read_messages(stream: TextIO) -> Iterator[Message]:
    """Decode all messages from an NDJSON text stream."""
    return iter_messages(stream)
