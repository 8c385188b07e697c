"""Application configuration and logging setup.

Settings come from ``CELLVIEW_*`` environment variables:

``CELLVIEW_MOUSE``            ``1`` to enable mouse reporting at startup
``CELLVIEW_TRUECOLOR``        ``0`` to downgrade colors to the 256 palette
``CELLVIEW_DOUBLE_CLICK_MS``  double-click interval (default 500)
``CELLVIEW_ESCAPE_TIMEOUT_MS`` wait for the rest of an escape sequence (default 10)
``CELLVIEW_LOG_FILE``         write log records to this file
``CELLVIEW_LOG_LEVEL``        log level name (default ``INFO``)
``CELLVIEW_WRITE_LOG``        append all terminal output to this file
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

__all__ = ["AppConfig", "configure_logging", "LOG_FORMAT"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning("ignoring %s=%r: not an integer", name, value)
        return default


@dataclass
class AppConfig:
    mouse: bool = False
    truecolor: bool = True
    double_click_ms: int = 500
    escape_timeout_ms: int = 10
    log_file: str = ""
    log_level: str = "INFO"
    write_log: str = ""

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> AppConfig:
        env = os.environ if env is None else env
        return cls(
            mouse=_env_flag(env, "CELLVIEW_MOUSE", False),
            truecolor=_env_flag(env, "CELLVIEW_TRUECOLOR", True),
            double_click_ms=_env_int(env, "CELLVIEW_DOUBLE_CLICK_MS", 500),
            escape_timeout_ms=_env_int(env, "CELLVIEW_ESCAPE_TIMEOUT_MS", 10),
            log_file=env.get("CELLVIEW_LOG_FILE", ""),
            log_level=env.get("CELLVIEW_LOG_LEVEL", "INFO").upper(),
            write_log=env.get("CELLVIEW_WRITE_LOG", ""),
        )


def configure_logging(config: AppConfig) -> logging.Handler | None:
    """Send ``cellview`` log records to ``config.log_file``.

    The terminal belongs to the UI, so nothing is installed when no log
    file is configured.  Returns the installed handler.
    """
    if not config.log_file:
        return None
    handler = logging.FileHandler(config.log_file)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger = logging.getLogger("cellview")
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, config.log_level, logging.INFO))
    return handler
