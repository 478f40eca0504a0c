"""Root conftest.py for junit-xml-formatter.

This provides shared pytest configuration across the test suite.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from _pytest.config import Config


# Make the package importable without installing it
PROJECT_ROOT = Path(__file__).parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


def pytest_configure(config: Config) -> None:
    """Register custom markers.

    Args:
        config: pytest configuration object.
    """
    config.addinivalue_line(
        "markers",
        "acceptance: Renders a complete report and compares it byte for byte",
    )


def pytest_report_header(config: Config) -> list[str]:
    """Add coverage mode info to pytest header.

    Args:
        config: pytest configuration object.

    Returns:
        List of header lines.
    """
    lines = ["junit-xml-formatter test suite"]

    # cov_source only exists when pytest-cov is installed
    if getattr(config.option, "cov_source", None):
        lines.append("Coverage: enabled")

    return lines
