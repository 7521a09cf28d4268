from __future__ import annotations

import logging
import os
from typing import Any


def resolve_log_level(config: dict[str, Any] | None = None, default: str = "INFO") -> str:
    """Pick a log level: `LOG_LEVEL` env var, then `logging.level` in config.yaml."""
    env = os.getenv("LOG_LEVEL")
    if env is not None and str(env).strip() != "":
        return str(env).strip().upper()

    section = (config or {}).get("logging")
    if isinstance(section, dict) and section.get("level"):
        return str(section["level"]).upper()
    return default


def setup_logging(level: int | str = "INFO") -> None:
    """Configure stdlib logging with a consistent, project-wide format."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        # Avoid duplicate handlers if called multiple times (e.g., notebooks + CLI).
        root_logger.setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
