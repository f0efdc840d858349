"""ToolChat-AI: a chat agent with human-in-the-loop tool approval."""

__version__ = "0.1.0"
