"""Checkpoint store: contract, in-memory and SQL implementations."""

from .interfaces import CheckpointStore
from .memory import InMemoryCheckpointStore
from .sql import SqlCheckpointStore, create_all, create_engine, create_sessionmaker

__all__ = [
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "SqlCheckpointStore",
    "create_all",
    "create_engine",
    "create_sessionmaker",
]
