from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.component_builder import ComponentBuilder


@pytest.fixture
def components(tmp_path: Path) -> ComponentBuilder:
    """Provide fake registered components rooted at the pytest tmp_path."""
    return ComponentBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_sxsgen_logger() -> Iterator[None]:
    """Drop handlers the CLI installs so later tests do not log to closed capture streams."""
    yield
    logger = logging.getLogger("sxsgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
