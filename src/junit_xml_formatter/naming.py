"""Naming strategies for test cases.

A naming strategy turns a pickle and its lineage into the name shown in the
report. Strategies are immutable values; the same strategy always renders
the same name for the same input.

With the default strategy a plain scenario is named after its rule (if any)
and itself, and an example row additionally after its examples block and
position:

    Eating cucumbers
    A rule - Eating cucumbers
    Eat <fruit> - Table 1 - Example #1.1
    Eat <fruit> - Table 1 - Example #1.2: Eat pears

The last form appears when the pickle name differs from the scenario name,
i.e. when the outline's name contains placeholders.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from junit_xml_formatter.lineage import Lineage
from junit_xml_formatter.messages.events import Pickle

SEPARATOR = " - "


class Length(Enum):
    """How much of the lineage to include.

    Attributes:
        LONG: Join every named node of the lineage.
        SHORT: Only the most specific named node.
    """

    LONG = "LONG"
    SHORT = "SHORT"


class FeatureName(Enum):
    """Whether the feature name is part of the test name."""

    INCLUDE = "INCLUDE"
    EXCLUDE = "EXCLUDE"


class ExampleName(Enum):
    """How to name an examples table row.

    Attributes:
        NUMBER: "#<examples>.<row>", 1-based.
        NUMBER_AND_PICKLE_IF_PARAMETERIZED: "Example #<examples>.<row>",
            followed by ": <pickle name>" if the pickle name was
            parameterized.
        PICKLE: The pickle name.
    """

    NUMBER = "NUMBER"
    NUMBER_AND_PICKLE_IF_PARAMETERIZED = "NUMBER_AND_PICKLE_IF_PARAMETERIZED"
    PICKLE = "PICKLE"


@dataclass(frozen=True)
class NamingStrategy:
    """Renders a test name from a pickle and its lineage.

    Attributes:
        length: LONG joins all segments, SHORT keeps the last one.
        feature_name: Whether to start with the feature name.
        example_name: How to render the example row segment.

    Example:
        >>> strategy = NamingStrategy(example_name=ExampleName.NUMBER)
        >>> strategy.reduce(lineage, pickle)
        'Eat <fruit> - Table 1 - #1.1'
    """

    length: Length = Length.LONG
    feature_name: FeatureName = FeatureName.EXCLUDE
    example_name: ExampleName = ExampleName.NUMBER_AND_PICKLE_IF_PARAMETERIZED

    def reduce(self, lineage: Lineage, pickle: Pickle) -> str:
        """Render the name of a pickle.

        Empty segments (e.g., an unnamed examples block) are left out.

        Args:
            lineage: Document ancestry of the pickle.
            pickle: The pickle to name.

        Returns:
            The test name.
        """
        segments: list[str] = []
        if self.feature_name is FeatureName.INCLUDE:
            segments.append(lineage.feature.name)
        if lineage.rule is not None:
            segments.append(lineage.rule.name)
        segments.append(lineage.scenario.name)
        if lineage.examples is not None:
            segments.append(lineage.examples.name)
        if lineage.is_example:
            segments.append(self._example_segment(lineage, pickle))

        segments = [segment for segment in segments if segment]
        if not segments:
            return pickle.name
        if self.length is Length.SHORT:
            return segments[-1]
        return SEPARATOR.join(segments)

    def _example_segment(self, lineage: Lineage, pickle: Pickle) -> str:
        if self.example_name is ExampleName.PICKLE:
            return pickle.name

        number = f"#{(lineage.examples_index or 0) + 1}.{(lineage.example_index or 0) + 1}"
        if self.example_name is ExampleName.NUMBER:
            return number

        segment = f"Example {number}"
        if pickle.name != lineage.scenario.name:
            segment = f"{segment}: {pickle.name}"
        return segment


DEFAULT_NAMING_STRATEGY = NamingStrategy()
"""Long names, feature excluded, examples numbered (pickle name if parameterized)."""
