"""Message types consumed by the formatter.

Types are organized into submodules by domain:

Submodules:
    common: Value types (Timestamp, Duration) and identifier aliases
    status: TestStepResultStatus and its severity order
    document: Gherkin document tree (Feature, Rule, Scenario, Examples, ...)
    events: Compiled and execution messages (Pickle, TestCase, TestCaseStarted, ...)

All types are exported from this package for convenience.
"""

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
    GherkinDocument,
    Rule,
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
from junit_xml_formatter.messages.status import SEVERITY, TestStepResultStatus

__all__ = [
    # Common types
    "AstNodeId",
    "Duration",
    "PickleId",
    "PickleStepId",
    "TestCaseId",
    "TestCaseStartedId",
    "TestStepId",
    "Timestamp",
    # Status
    "SEVERITY",
    "TestStepResultStatus",
    # Document types
    "Background",
    "Examples",
    "Feature",
    "GherkinDocument",
    "Rule",
    "Scenario",
    "Step",
    "TableRow",
    # Execution types
    "ExceptionInfo",
    "Message",
    "Pickle",
    "PickleStep",
    "TestCase",
    "TestCaseFinished",
    "TestCaseStarted",
    "TestRunFinished",
    "TestRunStarted",
    "TestStep",
    "TestStepFinished",
    "TestStepResult",
]
