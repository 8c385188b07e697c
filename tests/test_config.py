"""Tests for cellview.config -- environment settings and logging."""

from __future__ import annotations

import logging

from cellview.config import AppConfig, configure_logging


class TestAppConfig:
    """Reading CELLVIEW_* variables."""

    def test_defaults(self) -> None:
        config = AppConfig.from_env({})
        assert config == AppConfig()
        assert config.double_click_ms == 500
        assert config.escape_timeout_ms == 10
        assert config.truecolor
        assert not config.mouse

    def test_values(self) -> None:
        config = AppConfig.from_env(
            {
                "CELLVIEW_MOUSE": "yes",
                "CELLVIEW_TRUECOLOR": "0",
                "CELLVIEW_DOUBLE_CLICK_MS": "300",
                "CELLVIEW_ESCAPE_TIMEOUT_MS": "25",
                "CELLVIEW_LOG_FILE": "/tmp/cellview.log",
                "CELLVIEW_LOG_LEVEL": "debug",
                "CELLVIEW_WRITE_LOG": "/tmp/out.log",
            }
        )
        assert config.mouse
        assert not config.truecolor
        assert config.double_click_ms == 300
        assert config.escape_timeout_ms == 25
        assert config.log_file == "/tmp/cellview.log"
        assert config.log_level == "DEBUG"
        assert config.write_log == "/tmp/out.log"

    def test_empty_flag_keeps_default(self) -> None:
        assert AppConfig.from_env({"CELLVIEW_TRUECOLOR": ""}).truecolor

    def test_bad_integer_falls_back(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="cellview.config"):
            config = AppConfig.from_env({"CELLVIEW_DOUBLE_CLICK_MS": "soon"})
        assert config.double_click_ms == 500
        assert "CELLVIEW_DOUBLE_CLICK_MS" in caplog.text


class TestConfigureLogging:
    """File logging for the cellview package."""

    def test_no_log_file(self) -> None:
        assert configure_logging(AppConfig()) is None

    def test_log_file(self, tmp_path) -> None:
        path = tmp_path / "cellview.log"
        handler = configure_logging(AppConfig(log_file=str(path), log_level="DEBUG"))
        package_logger = logging.getLogger("cellview")
        try:
            assert handler in package_logger.handlers
            assert package_logger.level == logging.DEBUG
            logging.getLogger("cellview.test").debug("hello %s", "file")
            handler.flush()
            assert "[DEBUG] cellview.test: hello file" in path.read_text()
        finally:
            package_logger.removeHandler(handler)
            handler.close()
            package_logger.setLevel(logging.NOTSET)
