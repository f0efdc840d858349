"""Core agent orchestration: state machine, adapters and persistence.

This package contains the engine room of the chat agent.

Design overview
---------------

- ``agent_core.runtime.AgentEngine`` drives a thread through the
  ``agent -> tool_approval -> tools`` loop on LangGraph, persisting a
  ``RunState`` checkpoint at every transition.
- Tool calls proposed by the model are reviewed by a human unless the run
  approves all tools. Reviewing suspends the run (``RunNode.suspended``); a
  later ``resume`` with a ``ReviewDecision`` continues it, possibly in
  another process.
- ``agent_core.model`` adapts pydantic-ai models, ``agent_core.tools``
  resolves static and MCP server tools, and ``agent_core.repos`` stores
  checkpoints in memory or in SQL.

Typical usage
-------------

Applications build a ``ChatAgentService`` with
``agent_core.factory.build_chat_service`` and call ``stream``, ``resume`` or
``history`` on it.
"""
