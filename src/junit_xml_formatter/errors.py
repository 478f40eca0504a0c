"""Exception types for junit-xml-formatter.

This module defines the exception hierarchy used throughout the formatter.
All formatter exceptions inherit from FormatterError, allowing consumers to
catch all formatter-specific errors with a single except clause.

Missing optional data (no run start, no finished event for an attempt, no
step results) is never an error: the query layer resolves those gaps with
documented default values. The exceptions below cover the cases where the
formatter must not guess.

Exception hierarchy:
    FormatterError (base)
    +-- ConsistencyError: A message referenced by id was never received
    +-- WriterClosedError: Messages written after the report was produced
    +-- MessageDecodeError: An NDJSON line is not a valid message envelope
    +-- ConfigError: Invalid formatter configuration
"""

from __future__ import annotations


class FormatterError(Exception):
    """Base exception for all formatter errors.

    This is the root of the formatter exception hierarchy. Catch this to
    handle any formatter-specific error.
    """


class ConsistencyError(FormatterError, LookupError):
    """Raised when the message stream is missing a message the report needs.

    For example a test case started event whose test case definition or
    pickle was never received, or a step result for a test step the test
    case does not define.
    The report cannot be produced without inventing data, so it is aborted.

    Attributes:
        kind: The kind of message that could not be found (e.g., "Pickle").
        key: The identifier that was looked up.
    """

    def __init__(self, kind: str, key: str, context: str = "") -> None:
        self.kind = kind
        self.key = key
        message = f"No {kind} found for id '{key}'"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)


class WriterClosedError(FormatterError):
    """Raised when writing a message to a writer that was already closed.

    Closing a closed writer is a no-op; writing to it is not.
    """


class MessageDecodeError(FormatterError):
    """Raised when a line of NDJSON input cannot be decoded.

    Attributes:
        line_number: 1-based line number of the offending line.
    """

    def __init__(self, line_number: int, reason: str) -> None:
        self.line_number = line_number
        super().__init__(f"Invalid message on line {line_number}: {reason}")


class ConfigError(FormatterError):
    """Raised for invalid formatter configuration.

    This includes unreadable or malformed configuration files and unknown
    naming strategy values.
    """
