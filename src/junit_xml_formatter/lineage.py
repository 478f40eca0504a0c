"""Ancestry of Gherkin document nodes.

A pickle only knows the ids of the document nodes it was compiled from. To
name and classify a test case we need the whole chain above those nodes:
the feature, the rule (if any), the scenario and, for scenario outlines, the
examples block and row. The LineageResolver walks each GherkinDocument once
and records that chain for every scenario and every examples row.

Example:
    >>> resolver = LineageResolver()
    >>> resolver.add_document(document)
    >>> lineage = resolver.lineage_for(pickle.ast_node_ids[-1])
    >>> lineage.feature.name
    'Eating'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from junit_xml_formatter.messages.common import AstNodeId
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

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Lineage:
    """The chain of document nodes a scenario or example row belongs to.

    Attributes:
        document: The document containing the nodes.
        feature: The owning feature.
        scenario: The scenario (or scenario outline).
        rule: The enclosing rule, if any.
        examples: The examples block, for example rows only.
        examples_index: 0-based position of the examples block in the scenario.
        example: The examples table row, for example rows only.
        example_index: 0-based position of the row in its examples block.
    """

    document: GherkinDocument
    feature: Feature
    scenario: Scenario
    rule: Rule | None = None
    examples: Examples | None = None
    examples_index: int | None = None
    example: TableRow | None = None
    example_index: int | None = None

    @property
    def is_example(self) -> bool:
        """Return True if this lineage ends in an examples table row."""
        return self.example is not None


class LineageResolver:
    """Index of document nodes by id.

    Records a Lineage for every scenario and examples row, and every step
    (including background steps) by id. Documents without a feature are
    accepted and contribute nothing.
    """

    def __init__(self) -> None:
        self._lineage_by_node_id: dict[AstNodeId, Lineage] = {}
        self._step_by_id: dict[AstNodeId, Step] = {}

    def add_document(self, document: GherkinDocument) -> None:
        """Index all nodes of a document.

        Args:
            document: The parsed feature file.
        """
        feature = document.feature
        if feature is None:
            logger.debug("Document %s has no feature", document.uri)
            return

        for child in feature.children:
            if isinstance(child, Rule):
                for rule_child in child.children:
                    self._add_child(document, feature, child, rule_child)
            else:
                self._add_child(document, feature, None, child)

    def _add_child(
        self,
        document: GherkinDocument,
        feature: Feature,
        rule: Rule | None,
        child: Background | Scenario,
    ) -> None:
        self._add_steps(child.steps)
        if isinstance(child, Scenario):
            self._add_scenario(document, feature, rule, child)

    def _add_scenario(
        self,
        document: GherkinDocument,
        feature: Feature,
        rule: Rule | None,
        scenario: Scenario,
    ) -> None:
        self._lineage_by_node_id[scenario.id] = Lineage(
            document=document,
            feature=feature,
            rule=rule,
            scenario=scenario,
        )
        for examples_index, examples in enumerate(scenario.examples):
            for example_index, row in enumerate(examples.table_body):
                self._lineage_by_node_id[row.id] = Lineage(
                    document=document,
                    feature=feature,
                    rule=rule,
                    scenario=scenario,
                    examples=examples,
                    examples_index=examples_index,
                    example=row,
                    example_index=example_index,
                )

    def _add_steps(self, steps: tuple[Step, ...]) -> None:
        for step in steps:
            self._step_by_id[step.id] = step

    def lineage_for(self, ast_node_id: AstNodeId) -> Lineage | None:
        """Look up the lineage of a scenario or examples row.

        Args:
            ast_node_id: Id of a scenario or examples table row.

        Returns:
            The Lineage, or None if no such node was indexed.
        """
        return self._lineage_by_node_id.get(ast_node_id)

    def step(self, step_id: AstNodeId) -> Step | None:
        """Look up a step by id.

        Args:
            step_id: Id of a scenario or background step.

        Returns:
            The Step, or None if no such step was indexed.
        """
        return self._step_by_id.get(step_id)
