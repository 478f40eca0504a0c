"""Tests for the JUnit XML report."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from junit_xml_formatter.config import FormatterConfig
from junit_xml_formatter.messages import (
    Duration,
    ExceptionInfo,
    TestRunFinished,
    TestRunStarted,
    TestStepResult,
    TestStepResultStatus,
    Timestamp,
)
from junit_xml_formatter.naming import ExampleName, NamingStrategy
from junit_xml_formatter.report import format_seconds, format_step_line

PASSED = TestStepResultStatus.PASSED
SKIPPED = TestStepResultStatus.SKIPPED
UNDEFINED = TestStepResultStatus.UNDEFINED
FAILED = TestStepResultStatus.FAILED

HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'


class TestFormatSeconds:
    """Tests for duration formatting."""

    @pytest.mark.parametrize(
        ("duration", "expected"),
        [
            (Duration(), "0"),
            (Duration(seconds=20), "20"),
            (Duration(nanos=5_000_000), "0.005"),
            (Duration(seconds=1, nanos=500_000_000), "1.5"),
            (Duration(seconds=1, nanos=250_000_000), "1.25"),
            (Duration(nanos=900_000), "0"),
            (Duration(seconds=1234, nanos=567_000_000), "1234.567"),
            (Duration.from_nanos(-1_500_000_000), "-1.5"),
        ],
    )
    def test_format_seconds(self, duration: Duration, expected: str) -> None:
        assert format_seconds(duration) == expected


class TestFormatStepLine:
    """Tests for step list lines."""

    def test_padded_to_column(self) -> None:
        line = format_step_line("Given a step", "passed")
        assert line == "Given a step" + "." * 64 + "passed\n"
        assert line.index("passed") == 76

    def test_long_text_is_not_padded(self) -> None:
        text = "Given " + "x" * 80
        assert format_step_line(text, "failed") == text + "failed\n"


@pytest.mark.acceptance
class TestReferenceOutput:
    """Tests comparing complete reports byte for byte."""

    def test_empty_stream(self, render) -> None:
        assert render([]) == (
            HEADER
            + '<testsuite name="Cucumber" time="0" tests="0" skipped="0" failures="0" errors="0">\n'
            + "</testsuite>\n"
        )

    def test_run_without_test_cases(self, render) -> None:
        messages = [
            TestRunStarted(timestamp=Timestamp(10)),
            TestRunFinished(timestamp=Timestamp(30)),
        ]
        assert render(messages) == (
            HEADER
            + '<testsuite name="Cucumber" time="20" tests="0" skipped="0" failures="0" errors="0"'
            + ' timestamp="1970-01-01T00:00:10Z">\n'
            + "</testsuite>\n"
        )

    def test_failing_scenario(self, builder, render) -> None:
        compiled = builder.scenario(
            "Eating cucumbers",
            steps=[("Given ", "there are 12 cucumbers"), ("Then ", "I should have 5 cucumbers")],
        )
        failure = TestStepResult(
            status=FAILED,
            exception=ExceptionInfo(
                type="AssertionError",
                message="expected 5",
                stack_trace="Traceback (most recent call last)",
            ),
        )
        messages = [
            TestRunStarted(timestamp=Timestamp(0)),
            *builder.definitions(),
            *builder.attempt(compiled, [PASSED, failure], start=1, end=3),
            TestRunFinished(timestamp=Timestamp(10)),
        ]
        assert render(messages) == (
            HEADER
            + '<testsuite name="Cucumber" time="10" tests="1" skipped="0" failures="1" errors="0"'
            + ' timestamp="1970-01-01T00:00:00Z">\n'
            + '<testcase classname="Eating" name="Eating cucumbers" time="2">\n'
            + '<failure type="AssertionError" message="expected 5">\n'
            + "<![CDATA[Traceback (most recent call last)]]>\n"
            + "</failure>\n"
            + "<system-out><![CDATA[\n"
            + "Given there are 12 cucumbers" + "." * 48 + "passed\n"
            + "Then I should have 5 cucumbers" + "." * 46 + "failed\n"
            + "]]></system-out>\n"
            + "</testcase>\n"
            + "</testsuite>\n"
        )

    def test_passing_scenario_without_steps(self, builder, render) -> None:
        compiled = builder.scenario("Nothing to do", steps=[])
        messages = [*builder.definitions(), *builder.attempt(compiled, [], start=0, end=1)]
        assert render(messages) == (
            HEADER
            + '<testsuite name="Cucumber" time="0" tests="1" skipped="0" failures="0" errors="0">\n'
            + '<testcase classname="Eating" name="Nothing to do" time="1">\n'
            + "</testcase>\n"
            + "</testsuite>\n"
        )

    def test_interrupted_before_any_step(self, builder, render) -> None:
        """Verify an attempt with steps but no step results still renders."""
        compiled = builder.scenario("Interrupted", steps=[("Given ", "a step")])
        messages = [*builder.definitions(), *builder.attempt(compiled, [], start=1, end=3)]
        assert render(messages) == (
            HEADER
            + '<testsuite name="Cucumber" time="0" tests="1" skipped="0" failures="0" errors="0">\n'
            + '<testcase classname="Eating" name="Interrupted" time="2">\n'
            + "</testcase>\n"
            + "</testsuite>\n"
        )

    def test_interrupted_after_a_failed_step(self, builder, render) -> None:
        compiled = builder.scenario("Interrupted", steps=[("Given ", "one"), ("Then ", "two")])
        output = render([*builder.definitions(), *builder.attempt(compiled, [FAILED], end=1)])
        suite = ET.fromstring(output)
        assert suite.get("failures") == "1"
        system_out = suite.find("testcase/system-out")
        assert system_out is not None
        assert system_out.text == "\n" + format_step_line("Given one", "failed")


class TestSuite:
    """Tests for testsuite attributes."""

    def test_aggregation(self, builder, render) -> None:
        """Verify skipped and failure counts."""
        passing = builder.scenario("Passing")
        skipped = builder.scenario("Skipped")
        failing = builder.scenario("Failing")
        undefined = builder.scenario("Undefined")
        messages = [
            *builder.definitions(),
            *builder.attempt(passing, [PASSED]),
            *builder.attempt(skipped, [SKIPPED]),
            *builder.attempt(failing, [FAILED]),
            *builder.attempt(undefined, [UNDEFINED]),
        ]
        suite = ET.fromstring(render(messages))
        assert suite.get("tests") == "4"
        assert suite.get("skipped") == "1"
        assert suite.get("failures") == "2"
        assert suite.get("errors") == "0"

    def test_suite_name(self, render) -> None:
        suite = ET.fromstring(render([], FormatterConfig(suite_name="Acceptance")))
        assert suite.get("name") == "Acceptance"
        assert suite.get("timestamp") is None


class TestTestCases:
    """Tests for testcase elements."""

    def test_attempts_in_arrival_order(self, builder, render) -> None:
        first = builder.scenario("First")
        second = builder.scenario("Second")
        messages = [
            *builder.definitions(),
            *builder.attempt(second, [PASSED]),
            *builder.attempt(first, [PASSED]),
        ]
        names = [testcase.get("name") for testcase in ET.fromstring(render(messages))]
        assert names == ["Second", "First"]

    def test_interleaving_does_not_change_report(self, builder, render) -> None:
        """Verify the report only depends on the messages, not their interleaving."""
        first = builder.scenario("First", steps=[("Given ", "a"), ("When ", "b")])
        second = builder.scenario("Second", steps=[("Given ", "c"), ("Then ", "d")])
        a = builder.attempt(first, [PASSED, FAILED], start=1, end=4, attempt_id="a")
        b = builder.attempt(second, [PASSED, SKIPPED], start=2, end=3, attempt_id="b")
        definitions = builder.definitions()

        sequential = [*definitions, *a, *b]
        interleaved = [*definitions, a[0], b[0], b[1], a[1], b[2], a[2], b[3], a[3]]
        definitions_last = [a[0], b[0], a[1], b[1], a[2], b[2], a[3], b[3], *reversed(definitions)]

        expected = render(sequential)
        assert render(interleaved) == expected
        assert render(definitions_last) == expected

    def test_retried_attempts_are_separate_test_cases(self, builder, render) -> None:
        compiled = builder.scenario("Flaky")
        messages = [
            *builder.definitions(),
            *builder.attempt(compiled, [FAILED], attempt_id="a1", attempt=0),
            *builder.attempt(compiled, [PASSED], attempt_id="a2", attempt=1),
        ]
        testcases = list(ET.fromstring(render(messages)))
        assert len(testcases) == 2
        assert testcases[0].find("failure") is not None
        assert testcases[1].find("failure") is None

    def test_example_name_is_escaped(self, builder, render) -> None:
        compiled = builder.outline("Eat <fruit>", examples=[("Table 1", ["Eat <fruit>"])])[0]
        output = render([*builder.definitions(), *builder.attempt(compiled, [PASSED])])
        assert 'name="Eat &lt;fruit&gt; - Table 1 - Example #1.1"' in output
        testcase = ET.fromstring(output).find("testcase")
        assert testcase is not None
        assert testcase.get("name") == "Eat <fruit> - Table 1 - Example #1.1"

    def test_naming_strategy_from_config(self, builder, render) -> None:
        compiled = builder.outline("Eat <fruit>", examples=[("Table 1", ["Eat apples"])])[0]
        config = FormatterConfig(naming_strategy=NamingStrategy(example_name=ExampleName.PICKLE))
        output = render([*builder.definitions(), *builder.attempt(compiled, [PASSED])], config)
        testcase = ET.fromstring(output).find("testcase")
        assert testcase is not None
        assert testcase.get("name") == "Eat <fruit> - Table 1 - Eat apples"

    def test_class_name_override(self, builder, render) -> None:
        compiled = builder.scenario("Eating cucumbers")
        config = FormatterConfig(test_class_name="com.example.Cucumbers")
        output = render([*builder.definitions(), *builder.attempt(compiled, [PASSED])], config)
        testcase = ET.fromstring(output).find("testcase")
        assert testcase is not None
        assert testcase.get("classname") == "com.example.Cucumbers"

    def test_hooks_are_not_listed(self, builder, render) -> None:
        compiled = builder.scenario("Hooked", steps=[("Given ", "a step")], hooks=1)
        output = render([*builder.definitions(), *builder.attempt(compiled, [PASSED, PASSED])])
        system_out = ET.fromstring(output).find("testcase/system-out")
        assert system_out is not None
        assert system_out.text == "\n" + format_step_line("Given a step", "passed")

    def test_unfinished_attempt_has_zero_time(self, builder, render) -> None:
        compiled = builder.scenario("Eating cucumbers")
        output = render([*builder.definitions(), *builder.attempt(compiled, [PASSED], start=5)])
        testcase = ET.fromstring(output).find("testcase")
        assert testcase is not None
        assert testcase.get("time") == "0"


class TestNonPassedElement:
    """Tests for failure and skipped elements."""

    def _testcase(self, builder, render, result: TestStepResult) -> tuple[str, ET.Element]:
        compiled = builder.scenario("Eating cucumbers")
        output = render([*builder.definitions(), *builder.attempt(compiled, [result])])
        testcase = ET.fromstring(output).find("testcase")
        assert testcase is not None
        return output, testcase

    def test_skipped_has_no_type(self, builder, render) -> None:
        result = TestStepResult(
            status=SKIPPED,
            exception=ExceptionInfo(type="SkipException", message="not today"),
        )
        output, testcase = self._testcase(builder, render, result)
        assert '<skipped message="not today"/>\n' in output
        skipped = testcase.find("skipped")
        assert skipped is not None
        assert skipped.get("type") is None

    def test_empty_failure(self, builder, render) -> None:
        output, testcase = self._testcase(builder, render, TestStepResult(status=UNDEFINED))
        assert "<failure/>\n" in output
        assert testcase.find("failure") is not None

    def test_message_is_used_without_stack_trace(self, builder, render) -> None:
        result = TestStepResult(status=FAILED, message="Step failed\n  at step.py:3")
        output, testcase = self._testcase(builder, render, result)
        assert "<failure>\n<![CDATA[Step failed\n  at step.py:3]]>\n</failure>\n" in output

    def test_stack_trace_wins_over_message(self, builder, render) -> None:
        result = TestStepResult(
            status=FAILED,
            message="message",
            exception=ExceptionInfo(type="Error", stack_trace="stack"),
        )
        _, testcase = self._testcase(builder, render, result)
        failure = testcase.find("failure")
        assert failure is not None
        assert failure.text == "\nstack\n"
        assert failure.get("type") == "Error"
        assert failure.get("message") is None

    def test_cdata_terminator_in_stack_trace(self, builder, render) -> None:
        """Verify "]]>" in user text still yields well-formed XML."""
        result = TestStepResult(status=FAILED, exception=ExceptionInfo(type="Error", stack_trace="foo]]>bar"))
        output, testcase = self._testcase(builder, render, result)
        assert "<![CDATA[foo]]]]><![CDATA[>bar]]>" in output
        failure = testcase.find("failure")
        assert failure is not None
        assert failure.text == "\nfoo]]>bar\n"

    def test_illegal_characters_in_message(self, builder, render) -> None:
        result = TestStepResult(status=FAILED, exception=ExceptionInfo(type="Error", message="NUL\x00"))
        output, testcase = self._testcase(builder, render, result)
        assert 'message="NUL&amp;#0;"' in output
        failure = testcase.find("failure")
        assert failure is not None
        assert failure.get("message") == "NUL&#0;"
