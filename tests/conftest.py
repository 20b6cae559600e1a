"""Root test configuration for relay tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load test environment (RELAY_LOG_LEVEL, RELAY_PLAIN_ERRORS, ...) before
# any test module imports relay.
load_dotenv(dotenv_path=Path(__file__).parent.parent / '.env.test')


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line('markers', 'unit: Unit tests (no I/O)')
