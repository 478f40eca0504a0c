"""Formatter configuration.

The report has three options: the test suite name, an optional class name
used for every test case instead of the feature name, and the naming
strategy for test cases. They can be given in code, on the command line, or
in a YAML file.

Example YAML:
    report:
      suite_name: "Acceptance"
      test_class_name: null
      naming:
        length: LONG
        feature_name: EXCLUDE
        example_name: NUMBER_AND_PICKLE_IF_PARAMETERIZED

Every key is optional; missing keys keep their defaults.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import yaml

from junit_xml_formatter.errors import ConfigError
from junit_xml_formatter.naming import (
    DEFAULT_NAMING_STRATEGY,
    ExampleName,
    FeatureName,
    Length,
    NamingStrategy,
)

DEFAULT_SUITE_NAME = "Cucumber"

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class FormatterConfig:
    """Options for the JUnit XML report.

    Attributes:
        suite_name: Value of the testsuite name attribute.
        test_class_name: Class name for every test case. If None, the
            feature name (or the feature file uri) of each test case is used.
        naming_strategy: How test case names are rendered.
    """

    suite_name: str = DEFAULT_SUITE_NAME
    test_class_name: str | None = None
    naming_strategy: NamingStrategy = DEFAULT_NAMING_STRATEGY

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.suite_name:
            raise ConfigError("suite_name must not be empty")

    def with_overrides(self, **overrides: Any) -> FormatterConfig:
        """Return a copy with the given non-None fields replaced.

        Args:
            **overrides: Field values; None values are ignored.

        Returns:
            The updated configuration.
        """
        changes = {name: value for name, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes)


def parse_enum(enum_type: type[E], value: Any, field_name: str) -> E:
    """Parse an enum member by name, case-insensitively.

    Args:
        enum_type: The enum class.
        value: Member name (e.g., "number" or "NUMBER") or member.
        field_name: Name used in error messages.

    Returns:
        The enum member.

    Raises:
        ConfigError: If the value does not name a member.
    """
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type[str(value).upper()]
    except KeyError:
        valid = ", ".join(member.name for member in enum_type)
        raise ConfigError(f"Invalid {field_name} '{value}', expected one of: {valid}") from None


def _optional_str(section: dict[str, Any], key: str) -> str | None:
    value = section.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"'report.{key}' must be a string, got {type(value).__name__}")
    return value


def config_from_dict(data: dict[str, Any]) -> FormatterConfig:
    """Build a configuration from parsed YAML data.

    Keys that are missing or null keep their default.

    Args:
        data: Mapping with an optional "report" section.

    Returns:
        The configuration.

    Raises:
        ConfigError: If a section has the wrong shape or a value is invalid.
    """
    report = data.get("report") or {}
    if not isinstance(report, dict):
        raise ConfigError("'report' must be a mapping")

    naming = report.get("naming") or {}
    if not isinstance(naming, dict):
        raise ConfigError("'report.naming' must be a mapping")

    strategy = NamingStrategy(
        length=parse_enum(Length, naming.get("length") or Length.LONG, "length"),
        feature_name=parse_enum(
            FeatureName, naming.get("feature_name") or FeatureName.EXCLUDE, "feature_name"
        ),
        example_name=parse_enum(
            ExampleName,
            naming.get("example_name") or ExampleName.NUMBER_AND_PICKLE_IF_PARAMETERIZED,
            "example_name",
        ),
    )

    suite_name = _optional_str(report, "suite_name")
    return FormatterConfig(
        suite_name=DEFAULT_SUITE_NAME if suite_name is None else suite_name,
        test_class_name=_optional_str(report, "test_class_name"),
        naming_strategy=strategy,
    )


def load_config(path: str | Path) -> FormatterConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        The configuration. An empty file yields the defaults.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigError: If the file is not valid YAML or has invalid values.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Formatter config not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return FormatterConfig()
    if not isinstance(data, dict):
        raise ConfigError("Formatter config must be a YAML mapping")

    return config_from_dict(data)
