"""
Monitoring and Tracing Configuration Module.

Optional integration with Pydantic Logfire. When ``LOGFIRE_ENABLED`` is true and
``LOGFIRE_TOKEN`` is set, ``initialize_logfire`` configures logfire and turns on
automatic instrumentation for:

- pydantic-ai model calls (the chat model adapter)
- SQLAlchemy (the checkpoint store)
- HTTPX (remote tool servers)
- FastAPI endpoints

The ``log_*`` helpers emit structured logfire records once monitoring is
initialized and otherwise fall back to the module logger.
"""

import logging
import os
from typing import Any, Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)

LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "toolchat-ai-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

_initialized = False


def is_enabled() -> bool:
    """Whether logfire has been configured for this process."""
    return _initialized


def initialize_logfire(app: FastAPI | None = None) -> None:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    Args:
        app: FastAPI application to instrument (optional).
    """
    global _initialized

    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return

    if not LOGFIRE_TOKEN:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set. Monitoring will not work.")
        return

    logfire.configure(
        token=LOGFIRE_TOKEN,
        service_name=LOGFIRE_SERVICE_NAME,
        service_version=LOGFIRE_SERVICE_VERSION,
        environment=LOGFIRE_ENVIRONMENT,
    )

    for name, instrument in (
        ("pydantic-ai", logfire.instrument_pydantic_ai),
        ("SQLAlchemy", logfire.instrument_sqlalchemy),
        ("HTTPX", logfire.instrument_httpx),
    ):
        try:
            instrument()
            logger.info(f"Logfire: {name} instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument {name}: {e}")

    if app is not None:
        try:
            logfire.instrument_fastapi(app=app)
            logger.info("Logfire: FastAPI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")

    _initialized = True
    logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")


def log_agent_turn(thread_id: str, kind: str, status: str, **attributes: Any) -> None:
    """
    Record the outcome of one stream invocation for a thread.

    Args:
        thread_id: The conversation thread identifier
        kind: ``message`` for new user text, ``resume`` for a review decision
        status: Final outcome (done, suspended, failed, interrupted)
        **attributes: Extra structured attributes
    """
    if _initialized:
        logfire.info("Agent turn finished", thread_id=thread_id, kind=kind, status=status, **attributes)
    else:
        logger.debug(f"Agent turn finished: thread_id={thread_id} kind={kind} status={status}")


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    if _initialized:
        logfire.error(f"{error_type}: {error_message}", **(context or {}))
    else:
        logger.debug(f"{error_type}: {error_message} context={context or {}}")
