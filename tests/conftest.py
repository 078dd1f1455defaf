"""
Shared test configuration and fixtures.

Test-type-specific fixtures are defined in their respective conftest.py files:
- tests/unit/conftest.py - Mock fixtures for unit tests
- tests/integration/conftest.py - Real app fixtures for integration tests
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def restore_package_logger() -> Iterator[None]:
    """
    Undo setup_logging after each test.

    The app lifespan and the CLI install a stdout JSON handler and stop
    propagation; later tests rely on caplog seeing package records.
    """
    yield
    logger = logging.getLogger("retention_service")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
