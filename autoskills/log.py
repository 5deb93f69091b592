"""Logging setup shared by the MCP server and the command line tool."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from autoskills.config import APP_NAME, AutoskillsConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    config: AutoskillsConfig, console_level: int = logging.INFO
) -> logging.Logger:
    """
    function_purpose: Configure application-wide logging to both console and rotating file.

    - Console output goes to stderr so the stdio transport on stdout stays clean.
    - Creates the log directory if needed.
    - Idempotent: a second call returns the already configured logger.
    """
    logger = logging.getLogger(APP_NAME)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    sh = logging.StreamHandler()
    sh.setLevel(console_level)
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    # Rotating file handler (5 files, 5MB each)
    try:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            config.log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
    except OSError as exc:
        logger.warning("File logging disabled (%s): %s", config.log_file, exc)
    else:
        fh.setLevel(logging.INFO)
        fh.setFormatter(formatter)
        logger.addHandler(fh)
        logger.info("Logging initialized. File: %s", str(config.log_file))

    return logger
