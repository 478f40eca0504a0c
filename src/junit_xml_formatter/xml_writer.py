"""Minimal XML writer with safe escaping of untrusted text.

Test names, step text and failure messages come from users and may contain
anything, including NUL characters or the CDATA terminator "]]>". This
writer guarantees well-formed output regardless:

- Characters that are not allowed in XML 1.0 are replaced by a visible
  "&#<code>;" placeholder before any other escaping, so in an attribute a
  NUL shows up as "&amp;#0;" and in CDATA as "&#0;".
- Attribute values escape &, <, > and ".
- CDATA text is split between "]]" and ">" wherever "]]>" occurs, producing
  adjacent CDATA sections that concatenate to the original text.

Example:
    >>> out = io.StringIO()
    >>> writer = EscapingXmlWriter(out)
    >>> writer.start_element("failure", {"message": 'a "quoted" <value>'})
    >>> writer.cdata("foo]]>bar")
    >>> writer.end_element()
    >>> out.getvalue()
    '<failure message="a &quot;quoted&quot; &lt;value&gt;"><![CDATA[foo]]]]><![CDATA[>bar]]>'
"""

from __future__ import annotations

import re
from typing import Mapping, TextIO

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

CDATA_START = "<![CDATA["
CDATA_END = "]]>"

_ILLEGAL_XML_CHARS = re.compile(r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")

_ATTRIBUTE_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
}

_ATTRIBUTE_SPECIAL_CHARS = re.compile('[&<>"]')


def replace_illegal_chars(text: str) -> str:
    """Replace characters not allowed in XML 1.0 with "&#<code>;" text.

    Args:
        text: Arbitrary text.

    Returns:
        Text containing only characters allowed in XML documents.
    """
    return _ILLEGAL_XML_CHARS.sub(lambda match: f"&#{ord(match.group())};", text)


def escape_attribute(value: str) -> str:
    """Escape a value for use inside a double-quoted attribute.

    Args:
        value: Arbitrary text.

    Returns:
        The escaped value, without surrounding quotes.
    """
    return _ATTRIBUTE_SPECIAL_CHARS.sub(
        lambda match: _ATTRIBUTE_ESCAPES[match.group()],
        replace_illegal_chars(value),
    )


def cdata_sections(text: str) -> str:
    """Wrap text in one or more CDATA sections.

    Every "]]>" in the text ends the current section after "]]" and starts a
    new one with ">", so no section contains its own terminator.

    Args:
        text: Arbitrary text.

    Returns:
        Concatenated CDATA sections.
    """
    safe = replace_illegal_chars(text)
    return CDATA_START + safe.replace(CDATA_END, "]]" + CDATA_END + CDATA_START + ">") + CDATA_END


class EscapingXmlWriter:
    """Streams XML markup to a text sink.

    Element nesting is tracked so that end_element() closes the innermost
    open element. Only the constructs the JUnit report needs are supported:
    elements, attributes, CDATA text and line breaks.

    Args:
        out: Text sink receiving the markup.
    """

    def __init__(self, out: TextIO) -> None:
        self._out = out
        self._open_elements: list[str] = []

    def start_document(self) -> None:
        """Write the XML declaration."""
        self._out.write(XML_DECLARATION)

    def end_document(self) -> None:
        """Finish the document.

        Raises:
            ValueError: If elements are still open.
        """
        if self._open_elements:
            raise ValueError(f"Unclosed elements: {', '.join(self._open_elements)}")

    def start_element(self, name: str, attributes: Mapping[str, str] | None = None) -> None:
        """Write a start tag.

        Args:
            name: Element name (not escaped, must be a valid XML name).
            attributes: Attribute values in output order.
        """
        self._out.write(f"<{name}{self._render_attributes(attributes)}>")
        self._open_elements.append(name)

    def empty_element(self, name: str, attributes: Mapping[str, str] | None = None) -> None:
        """Write a self-closing element.

        Args:
            name: Element name.
            attributes: Attribute values in output order.
        """
        self._out.write(f"<{name}{self._render_attributes(attributes)}/>")

    def end_element(self) -> None:
        """Write the end tag of the innermost open element.

        Raises:
            ValueError: If no element is open.
        """
        if not self._open_elements:
            raise ValueError("No open element to end")
        self._out.write(f"</{self._open_elements.pop()}>")

    def cdata(self, text: str) -> None:
        """Write text as CDATA.

        Args:
            text: Arbitrary text.
        """
        self._out.write(cdata_sections(text))

    def newline(self) -> None:
        """Write a line break."""
        self._out.write("\n")

    @staticmethod
    def _render_attributes(attributes: Mapping[str, str] | None) -> str:
        if not attributes:
            return ""
        return "".join(
            f' {name}="{escape_attribute(value)}"' for name, value in attributes.items()
        )
