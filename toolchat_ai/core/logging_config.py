"""
Logging Configuration Module.

Centralized logging setup for the ToolChat-AI service. Every module obtains its
logger through ``get_logger(__name__)``; the process bootstrap (server startup
or a script) calls ``setup_logging`` once.

Features:
- Configurable root level and per-module levels
- Console logging plus optional file logging
- Simple, detailed and JSON-like line formats
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

LOG_FILE_NAME = "toolchat_ai.log"

# Module-specific log levels
MODULE_LOG_LEVELS: Dict[str, str] = {
    "toolchat_ai.agent_core": "INFO",
    "toolchat_ai.agent_core.runtime": "DEBUG",
    "toolchat_ai.agent_core.tools": "INFO",
    "toolchat_ai.agent_core.repos": "INFO",
    "toolchat_ai.mcp_client": "INFO",
    "toolchat_ai.server": "INFO",
    "toolchat_ai.server.api": "DEBUG",
    # Third-party libraries (reduce noise)
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "httpx": "WARNING",
    "mcp": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _format_for(name: str) -> str:
    if name == "json":
        return JSON_FORMAT
    if name == "simple":
        return SIMPLE_FORMAT
    return DETAILED_FORMAT


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: Optional[bool] = None,
    log_file_dir: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Values not passed explicitly fall back to the ``TOOLCHAT_AI_LOG_LEVEL``,
    ``LOG_FORMAT``, ``ENABLE_FILE_LOGGING`` and ``LOG_FILE_DIR`` environment
    variables.

    Args:
        log_level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: One of ``simple``, ``detailed`` or ``json``
        enable_file: Whether to also write a log file
        log_file_dir: Directory for the log file
    """
    level = (log_level or os.getenv("TOOLCHAT_AI_LOG_LEVEL", "INFO")).upper()
    fmt = log_format or os.getenv("LOG_FORMAT", "detailed")
    file_enabled = _env_flag("ENABLE_FILE_LOGGING", "false") if enable_file is None else enable_file
    file_dir = log_file_dir or os.getenv("LOG_FILE_DIR", "logs")

    formatter = logging.Formatter(_format_for(fmt), datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # filter at handler level

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if file_enabled:
        Path(file_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(Path(file_dir) / LOG_FILE_NAME)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={fmt}, file_logging={file_enabled}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A logger instance
    """
    return logging.getLogger(name)
