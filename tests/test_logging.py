"""Tests for sxsgen.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from sxsgen.cli import _build_parser
from sxsgen.logging import configure_logging, get_logger, resolve_level


def test_resolve_level() -> None:
    assert resolve_level() == logging.INFO
    assert resolve_level(quiet=True) == logging.WARNING
    assert resolve_level(verbose=True, quiet=True) == logging.DEBUG


def test_quiet_console_still_fills_log_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "sxsgen.log"
    logger = configure_logging(quiet=True, log_file=log_file)

    get_logger("resolver").debug("Object %s resolved", "{X}")
    for handler in logger.handlers:
        handler.flush()

    console, sink = logger.handlers
    assert console.level == logging.WARNING
    assert sink.level == logging.DEBUG
    assert "DEBUG sxsgen.resolver: Object {X} resolved" in log_file.read_text(encoding="utf-8")
    sink.close()


def test_cli_accepts_quiet_on_either_side() -> None:
    parser = _build_parser()
    assert parser.parse_args(["-q", "binary", "App.exe"]).quiet is True
    assert parser.parse_args(["binary", "App.exe", "--quiet"]).quiet is True
    assert parser.parse_args(["binary", "App.exe"]).quiet is False
