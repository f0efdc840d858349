"""Shared pydantic configuration for messages, run state and review payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base model for everything that is checkpointed or sent to a client.

    Fields accept either their Python name or their camelCase alias
    (``tool_call`` / ``toolCall``), and unknown keys are rejected so a
    malformed checkpoint or review payload fails validation.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
    )
