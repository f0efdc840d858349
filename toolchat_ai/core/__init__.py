"""
Core utilities for ToolChat-AI.

Shared logging configuration and optional monitoring hooks.
"""

from toolchat_ai.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
