"""
Exception handlers for the FastAPI application.

``setup_exception_handlers`` registers the agent error mapping and the global
fallback handler.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
