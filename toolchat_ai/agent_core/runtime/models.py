from __future__ import annotations

"""Runtime dependency bundle and LangGraph state types.

The orchestrator is dependency-injected and built per run:

- ``EngineDeps`` collects the checkpoint store, the chat model chosen for this
  invocation and the per-run tool registry.
- ``_GraphState`` is the state passed between LangGraph nodes.

Only ``RunState`` is ever persisted; the other graph keys live for a single
invocation.
"""

from dataclasses import dataclass
from typing import List, NotRequired, Optional, Required, TypedDict

from ..model import ChatModelAdapter
from ..repos import CheckpointStore
from ..schemas.domain import Message, ReviewDecision, RunState
from ..tools import ToolRegistry


@dataclass(frozen=True)
class EngineDeps:
    """Dependency bundle for ``AgentEngine``.

    This object is constructed by ``ChatAgentService`` for each invocation. It
    holds:

    - the checkpoint store every transition is written to
    - the chat model adapter resolved for this invocation
    - the tool registry snapshot of this run
    - run policy: the system prompt and whether tool calls skip review.
    """

    checkpoints: CheckpointStore
    chat_model: ChatModelAdapter
    tools: ToolRegistry

    model_id: Optional[str] = None
    system_prompt: Optional[str] = None
    approve_all_tools: bool = False
    max_steps: int = 50


class _GraphState(TypedDict):
    """LangGraph state for a single orchestrator invocation.

    Required keys:

    - ``run``: the current ``RunState``. Nodes never mutate it in place; each
      returns an updated copy that has already been checkpointed.

    Optional keys:

    - ``decision``: one-shot review decision consumed by ``tool_approval``.
    - ``emitted``: messages produced by the node that just ran, read by the
      turn streaming adapter from ``updates`` stream chunks.
    """

    run: Required[RunState]
    decision: NotRequired[Optional[ReviewDecision]]
    emitted: NotRequired[List[Message]]
