"""
Database Models.

This module defines the SQLModel (SQLAlchemy) data models that map to database tables.
Checkpoint rows are owned by ``toolchat_ai.agent_core.repos.models``.
"""
