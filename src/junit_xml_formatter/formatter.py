"""Formatter facade.

MessagesToJunitXmlWriter collects the messages of one test run and writes a
JUnit XML report when it is closed.

Example:
    >>> with open("report.xml", "w", encoding="utf-8") as out:
    ...     with MessagesToJunitXmlWriter(out) as writer:
    ...         for message in messages:
    ...             writer.write(message)
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TextIO

from junit_xml_formatter.config import FormatterConfig
from junit_xml_formatter.errors import WriterClosedError
from junit_xml_formatter.index import EventIndex
from junit_xml_formatter.query import Query
from junit_xml_formatter.report import ReportData, ReportWriter

logger = logging.getLogger(__name__)


class MessagesToJunitXmlWriter:
    """Writes messages of a test run as a JUnit XML report.

    Messages may arrive in any order that keeps each attempt's own events
    ordered. The report is only produced on close(), once all messages are
    known. The output sink belongs to the caller and is never closed.

    Args:
        out: Text sink receiving the report.
        config: Formatter configuration. Defaults are used if None.
    """

    def __init__(self, out: TextIO, config: FormatterConfig | None = None) -> None:
        self._out = out
        self._config = config or FormatterConfig()
        self._index = EventIndex()
        self._closed = False

    @property
    def closed(self) -> bool:
        """Return True once close() has been called."""
        return self._closed

    def write(self, message: object) -> None:
        """Collect a message.

        Args:
            message: A decoded message. Unrecognized types are ignored.

        Raises:
            WriterClosedError: If the writer was already closed.
        """
        if self._closed:
            raise WriterClosedError("Stream closed")
        self._index.ingest(message)

    def close(self) -> None:
        """Write the report.

        Closing again is a no-op. The writer counts as closed even when the
        report could not be produced.

        Raises:
            ConsistencyError: If a message the report needs is missing. Nothing
                is written in that case.
        """
        if self._closed:
            return
        try:
            data = ReportData(Query(self._index), self._config)
            ReportWriter(data).write_report(self._out)
            logger.info(
                "Wrote JUnit XML report with %d test case(s) from %d message(s)",
                data.test_case_count(),
                self._index.message_count,
            )
        finally:
            self._closed = True

    def __enter__(self) -> MessagesToJunitXmlWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            # The message stream is incomplete; leave the sink untouched.
            self._closed = True
            return
        self.close()
