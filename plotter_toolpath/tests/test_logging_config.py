"""Tests for logging setup and contextual fields."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from plotter_toolpath.configs.loader import config_from_dict
from plotter_toolpath.gcode.generator import ToolpathExporter
from plotter_toolpath.logging_config import (
    ContextFormatter,
    get_context,
    log_context,
    pop_context,
    push_context,
    setup_logging,
)
from plotter_toolpath.model.vector_model import VectorModel


@pytest.fixture(autouse=True)
def clean_context():
    pop_context()
    yield
    pop_context()


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="plotter_toolpath.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestContext:
    def test_push_and_pop(self) -> None:
        push_context(dialect="reprap", layer="fill")
        assert get_context() == {"dialect": "reprap", "layer": "fill"}
        pop_context(["layer"])
        assert get_context() == {"dialect": "reprap"}

    def test_log_context_restores(self) -> None:
        push_context(dialect="standard")
        with log_context(layer="outline"):
            assert get_context() == {"dialect": "standard", "layer": "outline"}
        assert get_context() == {"dialect": "standard"}


class TestContextFormatter:
    def test_human(self) -> None:
        fmt = ContextFormatter("human", use_color=False)
        with log_context(layer="fill"):
            line = fmt.format(_record())
        assert "| INFO     | layer=fill | hello" in line

    def test_json(self) -> None:
        fmt = ContextFormatter("json", use_color=False)
        with log_context(layer="fill"):
            data = json.loads(fmt.format(_record()))
        assert data["lvl"] == "INFO"
        assert data["layer"] == "fill"
        assert data["msg"] == "hello"


class TestSetupLogging:
    def test_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "export.log"
        root = logging.getLogger()
        handlers = setup_logging("DEBUG", "json", str(log_file), to_stderr=False)
        try:
            logging.getLogger("plotter_toolpath.test").info("written")
        finally:
            for handler in handlers:
                root.removeHandler(handler)
                handler.close()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["msg"] == "written"

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging("LOUD", to_stderr=False)

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unknown log format"):
            setup_logging("INFO", "xml", to_stderr=False)


class TestLibraryLogging:
    def test_export_logs_through_package_logger(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        exporter = ToolpathExporter(config_from_dict({}))
        with caplog.at_level(logging.INFO, logger="plotter_toolpath"):
            exporter.export(VectorModel())
        assert "Starting export" in caplog.text
        assert any(r.name.startswith("plotter_toolpath.") for r in caplog.records)
