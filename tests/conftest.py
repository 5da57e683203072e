from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest

from spreadsheet_parser.casting.registry import CasterRegistry, default_casters
from spreadsheet_parser.parsing.pipeline import RowPipeline
from sheet_fixtures import ValidFixture


@pytest.fixture()
def valid_rows() -> list[list[Any]]:
    """Two complete rows for `ValidFixture` (no header): the first with an empty date."""
    return [
        ["a@x.com", "1", "", "S"],
        ["b@x.com", "2", "10/31/1977", "T"],
    ]


@pytest.fixture()
def casters() -> CasterRegistry:
    """A fresh default registry per test, safe to register into."""
    return default_casters()


@pytest.fixture()
def valid_pipeline(casters: CasterRegistry) -> RowPipeline[ValidFixture]:
    """Pipeline for `ValidFixture` with the default validator."""
    return RowPipeline(ValidFixture, casters=casters)


@pytest.fixture()
def write_descriptor(tmp_path: Path) -> Callable[[str], Path]:
    """Writes YAML text to a descriptor file under `tmp_path`, returns its path."""
    def _write(text: str, name: str = "descriptor.yml") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """CLI tests attach a handler to the package logger; put it back afterwards."""
    logger = logging.getLogger("spreadsheet_parser")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
