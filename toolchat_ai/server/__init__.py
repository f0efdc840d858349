"""
ToolChat-AI Server Package.

FastAPI transport for the chat agent: an SSE stream per turn, thread history,
thread metadata and tool server registrations. Run it with
``uvicorn toolchat_ai.server.main:app`` or the ``toolchat-ai-server`` script.
"""
