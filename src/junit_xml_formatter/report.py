"""JUnit XML report serialization.

ReportData answers the questions the report asks, combining the Query with
the formatter configuration. ReportWriter lays the answers out as a JUnit
XML document understood by Jenkins and Surefire:

    <?xml version="1.0" encoding="UTF-8"?>
    <testsuite name="Cucumber" time="0.02" tests="1" skipped="0" failures="1" errors="0">
    <testcase classname="Eating" name="Eating cucumbers" time="0.01">
    <failure type="AssertionError" message="expected 5">
    <![CDATA[stack trace]]>
    </failure>
    <system-out><![CDATA[
    Given there are 12 cucumbers.............................................passed
    Then I should have 5 cucumbers...........................................failed
    ]]></system-out>
    </testcase>
    </testsuite>

The whole document is rendered into a buffer before it is written to the
sink, so a ConsistencyError never leaves a partial report behind.
"""

from __future__ import annotations

import io
import logging
from typing import TextIO

from junit_xml_formatter.config import FormatterConfig
from junit_xml_formatter.messages.common import Duration
from junit_xml_formatter.messages.events import TestCaseStarted, TestStepResult
from junit_xml_formatter.messages.status import TestStepResultStatus
from junit_xml_formatter.query import Query
from junit_xml_formatter.xml_writer import EscapingXmlWriter

logger = logging.getLogger(__name__)

# Step text is padded with dots up to this column before the status label.
STEP_LINE_WIDTH = 76

NOT_FAILURES = frozenset({TestStepResultStatus.PASSED, TestStepResultStatus.SKIPPED})


def format_seconds(duration: Duration) -> str:
    """Format a duration as seconds with millisecond precision.

    Trailing zeros are trimmed and no digit grouping is used, independent of
    the locale.

    Args:
        duration: The duration.

    Returns:
        A string like "0", "20" or "0.005".
    """
    millis = duration.to_millis()
    sign = "-" if millis < 0 else ""
    seconds, fraction = divmod(abs(millis), 1000)
    if not fraction:
        return f"{sign}{seconds}"
    return f"{sign}{seconds}.{fraction:03d}".rstrip("0")


def format_step_line(text: str, label: str) -> str:
    """Render one line of the step list.

    Example:
        >>> format_step_line("Given a step", "passed")[-10:]
        '.....passed'
    """
    return text + "." * max(0, STEP_LINE_WIDTH - len(text)) + label + "\n"


class ReportData:
    """The facts a JUnit report needs, as strings and counts.

    Args:
        query: Query over the complete message index.
        config: Formatter configuration.
    """

    def __init__(self, query: Query, config: FormatterConfig) -> None:
        self._query = query
        self._config = config

    @property
    def suite_name(self) -> str:
        return self._config.suite_name

    def suite_duration(self) -> str:
        return format_seconds(self._query.run_duration())

    def run_started_at(self) -> str | None:
        """Return the run start as an ISO-8601 instant, if known."""
        started = self._query.run_started_at()
        return started.to_iso8601() if started is not None else None

    def test_case_count(self) -> int:
        return self._query.attempt_count()

    def status_counts(self) -> dict[TestStepResultStatus, int]:
        return self._query.status_counts()

    def attempts(self) -> list[TestCaseStarted]:
        return self._query.attempts()

    def test_class_name(self, attempt: TestCaseStarted) -> str:
        """Return the configured class name, or the attempt's feature name."""
        if self._config.test_class_name is not None:
            return self._config.test_class_name
        return self._query.class_name(attempt)

    def test_name(self, attempt: TestCaseStarted) -> str:
        return self._query.display_name(attempt, self._config.naming_strategy)

    def duration(self, attempt: TestCaseStarted) -> str:
        return format_seconds(self._query.attempt_duration(attempt))

    def test_case_status(self, attempt: TestCaseStarted) -> TestStepResult:
        return self._query.most_severe_outcome(attempt)

    def steps_and_results(self, attempt: TestCaseStarted) -> list[tuple[str, str]]:
        return self._query.steps_and_outcomes(attempt)


class ReportWriter:
    """Serializes ReportData as a JUnit XML document.

    Args:
        data: The report facts.
    """

    def __init__(self, data: ReportData) -> None:
        self._data = data

    def render(self) -> str:
        """Render the complete report.

        Returns:
            The XML document.

        Raises:
            ConsistencyError: If a message the report needs is missing.
        """
        buffer = io.StringIO()
        writer = EscapingXmlWriter(buffer)
        writer.start_document()
        writer.newline()
        self._write_testsuite(writer)
        writer.end_document()
        return buffer.getvalue()

    def write_report(self, out: TextIO) -> None:
        """Render the report and write it to a text sink.

        Nothing is written if rendering fails.

        Args:
            out: The sink. It is not closed.
        """
        out.write(self.render())
        out.flush()

    def _write_testsuite(self, writer: EscapingXmlWriter) -> None:
        writer.start_element("testsuite", self._suite_attributes())
        writer.newline()
        for attempt in self._data.attempts():
            self._write_testcase(writer, attempt)
        writer.end_element()
        writer.newline()

    def _suite_attributes(self) -> dict[str, str]:
        counts = self._data.status_counts()
        failures = sum(
            count for status, count in counts.items() if status not in NOT_FAILURES
        )
        attributes = {
            "name": self._data.suite_name,
            "time": self._data.suite_duration(),
            "tests": str(self._data.test_case_count()),
            "skipped": str(counts[TestStepResultStatus.SKIPPED]),
            "failures": str(failures),
            "errors": "0",
        }
        started_at = self._data.run_started_at()
        if started_at is not None:
            attributes["timestamp"] = started_at
        return attributes

    def _write_testcase(self, writer: EscapingXmlWriter, attempt: TestCaseStarted) -> None:
        logger.debug("Writing test case for attempt %s", attempt.id)
        writer.start_element(
            "testcase",
            {
                "classname": self._data.test_class_name(attempt),
                "name": self._data.test_name(attempt),
                "time": self._data.duration(attempt),
            },
        )
        writer.newline()
        self._write_non_passed(writer, attempt)
        self._write_step_list(writer, attempt)
        writer.end_element()
        writer.newline()

    def _write_non_passed(self, writer: EscapingXmlWriter, attempt: TestCaseStarted) -> None:
        result = self._data.test_case_status(attempt)
        status = result.status
        if status is TestStepResultStatus.PASSED:
            return

        name = "skipped" if status is TestStepResultStatus.SKIPPED else "failure"
        exception = result.exception
        attributes: dict[str, str] = {}
        if exception is not None:
            if status is not TestStepResultStatus.SKIPPED:
                attributes["type"] = exception.type
            if exception.message is not None:
                attributes["message"] = exception.message

        # Older implementations put the stack trace in the message.
        body = result.message
        if exception is not None and exception.stack_trace is not None:
            body = exception.stack_trace

        if body is None:
            writer.empty_element(name, attributes)
        else:
            writer.start_element(name, attributes)
            writer.newline()
            writer.cdata(body)
            writer.newline()
            writer.end_element()
        writer.newline()

    def _write_step_list(self, writer: EscapingXmlWriter, attempt: TestCaseStarted) -> None:
        steps = self._data.steps_and_results(attempt)
        if not steps:
            return
        text = "\n" + "".join(format_step_line(step, label) for step, label in steps)
        writer.start_element("system-out")
        writer.cdata(text)
        writer.end_element()
        writer.newline()
