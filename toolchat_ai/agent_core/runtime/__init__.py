"""Orchestration runtime: LangGraph engine and turn streaming adapter."""

from .engine import AgentEngine, EngineStep, next_pending_call, unanswered_tool_calls, validate_decision
from .models import EngineDeps
from .streaming import TurnOutcome, TurnStatus, TurnStream

__all__ = [
    "AgentEngine",
    "EngineDeps",
    "EngineStep",
    "TurnOutcome",
    "TurnStatus",
    "TurnStream",
    "next_pending_call",
    "unanswered_tool_calls",
    "validate_decision",
]
