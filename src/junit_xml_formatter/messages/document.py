"""Gherkin document types.

A GherkinDocument is the parsed form of one feature file. Only the parts of
the tree needed to name and classify test cases are modelled: features,
rules, backgrounds, scenarios (including scenario outlines), examples tables
and steps.

Tree shape:
    GherkinDocument
    +-- Feature
        +-- Background
        +-- Scenario
        |   +-- Step
        |   +-- Examples
        |       +-- TableRow
        +-- Rule
            +-- Background
            +-- Scenario

Example:
    >>> scenario = Scenario(
    ...     id="2",
    ...     name="Eating cucumbers",
    ...     steps=(Step(id="1", keyword="Given ", text="there are 12 cucumbers"),),
    ... )
    >>> document = GherkinDocument(
    ...     uri="features/eating.feature",
    ...     feature=Feature(name="Eating", children=(scenario,)),
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from junit_xml_formatter.messages.common import AstNodeId


@dataclass(frozen=True)
class Step:
    """A step as written in the feature file.

    Attributes:
        id: Node identifier.
        keyword: Step keyword including its trailing space (e.g., "Given ").
        text: Step text as written, before parameter substitution.
    """

    id: AstNodeId
    keyword: str
    text: str = ""


@dataclass(frozen=True)
class TableRow:
    """A row of an examples table.

    Attributes:
        id: Node identifier.
        cells: Cell values of the row.
    """

    id: AstNodeId
    cells: tuple[str, ...] = ()


@dataclass(frozen=True)
class Examples:
    """An examples block of a scenario outline.

    Attributes:
        id: Node identifier.
        name: Examples block name, may be empty.
        table_body: Data rows of the examples table (header excluded).
    """

    id: AstNodeId
    name: str = ""
    table_body: tuple[TableRow, ...] = ()


@dataclass(frozen=True)
class Scenario:
    """A scenario or scenario outline.

    Attributes:
        id: Node identifier.
        name: Scenario name; for outlines this may contain <placeholders>.
        steps: Steps of the scenario.
        examples: Examples blocks (empty unless this is an outline).
    """

    id: AstNodeId
    name: str = ""
    steps: tuple[Step, ...] = ()
    examples: tuple[Examples, ...] = ()


@dataclass(frozen=True)
class Background:
    """Steps shared by every scenario of a feature or rule."""

    id: AstNodeId
    name: str = ""
    steps: tuple[Step, ...] = ()


RuleChild = Union[Background, Scenario]


@dataclass(frozen=True)
class Rule:
    """A rule grouping scenarios within a feature."""

    id: AstNodeId
    name: str = ""
    children: tuple[RuleChild, ...] = ()


FeatureChild = Union[Background, Scenario, Rule]


@dataclass(frozen=True)
class Feature:
    """The top-level node of a feature file."""

    name: str = ""
    children: tuple[FeatureChild, ...] = ()


@dataclass(frozen=True)
class GherkinDocument:
    """A parsed feature file.

    Attributes:
        uri: Location of the feature file.
        feature: The feature, or None if the file was empty.
    """

    uri: str | None = None
    feature: Feature | None = None
