"""Command-line interface for junit-xml-formatter.

Converts a file of Cucumber messages (NDJSON) to a JUnit XML report.

Usage:
    # Write the report to standard output
    junit-xml-formatter messages.ndjson

    # Read from standard input, write to a file
    cat messages.ndjson | junit-xml-formatter - -o report.xml

    # Write messages.xml into a directory (the current one if omitted)
    junit-xml-formatter messages.ndjson -o reports/
    junit-xml-formatter messages.ndjson -o

    # Name examples by number, take the rest from a config file
    junit-xml-formatter messages.ndjson -e NUMBER -c formatter.yaml
"""

from __future__ import annotations

import argparse
import dataclasses
import io
import logging
import sys
from pathlib import Path
from typing import TextIO

from junit_xml_formatter import __version__
from junit_xml_formatter.config import FormatterConfig, load_config, parse_enum
from junit_xml_formatter.errors import ConfigError, FormatterError
from junit_xml_formatter.formatter import MessagesToJunitXmlWriter
from junit_xml_formatter.naming import ExampleName
from junit_xml_formatter.ndjson import read_messages

PROG = "junit-xml-formatter"
STDIN = "-"

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging to standard error."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def resolve_output_path(source: str, output: Path) -> Path:
    """Decide where to write the report.

    If output is a directory, the report is named after the input file with
    its suffix replaced by ".xml". Existing files are never overwritten in
    that case; a counter is added instead ("messages.1.xml", ...).

    Args:
        source: Input file path.
        output: Output file or directory.

    Returns:
        The report path.
    """
    if not output.is_dir():
        return output

    stem = Path(source).stem
    candidate = output / f"{stem}.xml"
    counter = 1
    while candidate.exists():
        candidate = output / f"{stem}.{counter}.xml"
        counter += 1
    return candidate


def build_config(args: argparse.Namespace) -> FormatterConfig:
    """Combine the config file (if any) with command line overrides.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ConfigError: If the config file or an option value is invalid.
    """
    config = load_config(args.config) if args.config else FormatterConfig()

    naming_strategy = None
    if args.example_naming_strategy is not None:
        example_name = parse_enum(ExampleName, args.example_naming_strategy, "example naming strategy")
        naming_strategy = dataclasses.replace(config.naming_strategy, example_name=example_name)

    return config.with_overrides(
        suite_name=args.suite_name,
        test_class_name=args.class_name,
        naming_strategy=naming_strategy,
    )


def convert(source: TextIO, out: TextIO, config: FormatterConfig) -> None:
    """Convert an NDJSON message stream to a JUnit XML report.

    Args:
        source: NDJSON text.
        out: Sink for the report. Nothing is written if conversion fails.
        config: Formatter configuration.

    Raises:
        MessageDecodeError: If a line cannot be decoded.
        ConsistencyError: If a message the report needs is missing.
    """
    with MessagesToJunitXmlWriter(out, config) as writer:
        for message in read_messages(source):
            writer.write(message)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Converts Cucumber messages to JUnit XML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "file",
        help="The input file containing Cucumber messages. Use - to read from standard input.",
    )
    parser.add_argument(
        "--output", "-o",
        nargs="?", const=".", default=None, metavar="FILE",
        help=(
            "The output file for the JUnit XML report. If FILE is a directory, the "
            "report is named after the input file with its suffix replaced by '.xml'. "
            "If FILE is omitted the current working directory is used. "
            "Without this option the report is written to standard output."
        ),
    )
    parser.add_argument(
        "--example-naming-strategy", "-e",
        metavar="STRATEGY",
        help=(
            "How to name examples. Valid values: "
            + ", ".join(member.name for member in ExampleName)
            + " (default: NUMBER_AND_PICKLE_IF_PARAMETERIZED)"
        ),
    )
    parser.add_argument("--suite-name", help="Test suite name (default: Cucumber)")
    parser.add_argument(
        "--class-name",
        help="Class name for every test case (default: the feature name)",
    )
    parser.add_argument("--config", "-c", help="YAML formatter configuration file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        0 on success, 1 if the report could not be produced. Usage errors
        exit with status 2.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.debug)

    from_stdin = args.file == STDIN
    output = Path(args.output) if args.output is not None else None
    if from_stdin and output is not None and output.is_dir():
        parser.error(
            f"Invalid value '{args.output}' for option '--output': When reading "
            "from standard input, output can not be a directory"
        )
    if not from_stdin and not Path(args.file).is_file():
        parser.error(f"Invalid argument, could not read '{args.file}'")

    try:
        config = build_config(args)
    except (ConfigError, FileNotFoundError) as exc:
        parser.error(str(exc))

    report = io.StringIO()
    try:
        if from_stdin:
            convert(sys.stdin, report, config)
        else:
            with open(args.file, encoding="utf-8") as source:
                convert(source, report, config)
    except FormatterError as exc:
        logger.error("Could not convert %s: %s", args.file, exc)
        return 1

    if output is None:
        sys.stdout.write(report.getvalue())
        sys.stdout.flush()
        return 0

    path = resolve_output_path(args.file, output)
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(report.getvalue())
    except OSError as exc:
        logger.error("Could not write to '%s': %s", path, exc)
        return 1

    logger.info("Report written to %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
