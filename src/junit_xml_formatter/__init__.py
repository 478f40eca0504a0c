"""Cucumber messages to JUnit XML.

This package converts the messages emitted by a Cucumber test run into a
JUnit XML report, as consumed by Jenkins, Surefire and most CI servers.
Messages may be interleaved arbitrarily between concurrently running test
cases; the report only depends on the set of messages received.

Key components:
    - Messages: Dataclasses for the Cucumber messages the report needs
      (GherkinDocument, Pickle, TestCase, TestCaseStarted, ...).
    - Formatter: MessagesToJunitXmlWriter collects messages and writes the
      report on close.
    - Naming: NamingStrategy renders test case names from the Gherkin
      document structure.
    - NDJSON: Decoding of newline-delimited message files.
    - Errors: Hierarchy of exception types rooted at FormatterError.

Example:
    >>> from junit_xml_formatter import MessagesToJunitXmlWriter, read_messages
    >>> with open("messages.ndjson", encoding="utf-8") as source, \\
    ...         open("report.xml", "w", encoding="utf-8") as out:
    ...     with MessagesToJunitXmlWriter(out) as writer:
    ...         for message in read_messages(source):
    ...             writer.write(message)
"""

__version__ = "0.1.0"

from junit_xml_formatter.config import FormatterConfig, load_config
from junit_xml_formatter.errors import (
    ConfigError,
    ConsistencyError,
    FormatterError,
    MessageDecodeError,
    WriterClosedError,
)
from junit_xml_formatter.formatter import MessagesToJunitXmlWriter
from junit_xml_formatter.naming import (
    DEFAULT_NAMING_STRATEGY,
    ExampleName,
    FeatureName,
    Length,
    NamingStrategy,
)
from junit_xml_formatter.ndjson import iter_messages, read_messages

__all__ = [
    "__version__",
    # Config
    "FormatterConfig",
    "load_config",
    # Errors
    "ConfigError",
    "ConsistencyError",
    "FormatterError",
    "MessageDecodeError",
    "WriterClosedError",
    # Formatter
    "MessagesToJunitXmlWriter",
    # Naming
    "DEFAULT_NAMING_STRATEGY",
    "ExampleName",
    "FeatureName",
    "Length",
    "NamingStrategy",
    # NDJSON
    "iter_messages",
    "read_messages",
]
