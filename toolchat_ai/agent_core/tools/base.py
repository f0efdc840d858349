"""Statically configured tools.

A ``StaticTool`` pairs a ``ToolSpec`` with a Python handler. Handlers may be
sync or async; sync handlers run in a worker thread. The return value is
normalized to text before it becomes a ``tool`` message.

Example::

    @function_tool
    async def get_weather(city: str, unit: str = "c") -> dict:
        ...
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, Union, get_type_hints

from pydantic import BaseModel, ConfigDict, create_model
from pydantic_core import to_json

from ..schemas import ToolSpec

ToolHandler = Callable[..., Union[Any, Awaitable[Any]]]


def result_to_text(value: Any) -> str:
    """Normalize a handler return value to the text content of a tool message."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return to_json(value, fallback=str).decode()


@dataclass(frozen=True)
class StaticTool:
    """A tool implemented in-process."""

    spec: ToolSpec
    handler: ToolHandler
    args_model: Optional[Type[BaseModel]] = None

    @property
    def name(self) -> str:
        return self.spec.name

    async def run(self, args: Dict[str, Any]) -> str:
        if self.args_model is not None:
            validated = self.args_model.model_validate(args or {})
            kwargs = {k: getattr(validated, k) for k in type(validated).model_fields}
        else:
            kwargs = dict(args or {})
        if inspect.iscoroutinefunction(self.handler):
            result = await self.handler(**kwargs)
        else:
            result = await asyncio.to_thread(self.handler, **kwargs)
            if inspect.isawaitable(result):
                result = await result
        return result_to_text(result)


def _signature_model(fn: Callable[..., Any]) -> Type[BaseModel]:
    hints = get_type_hints(fn)
    fields: Dict[str, Tuple[Any, Any]] = {}
    for param in inspect.signature(fn).parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = hints.get(param.name, Any)
        default = param.default if param.default is not param.empty else ...
        fields[param.name] = (annotation, default)
    return create_model(
        f"{fn.__name__}_args",
        __config__=ConfigDict(extra="forbid"),
        **fields,  # type: ignore[call-overload]
    )


def function_tool(
    fn: Optional[ToolHandler] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Any:
    """Build a ``StaticTool`` from a function, deriving its JSON schema from the signature.

    Usable bare (``@function_tool``) or with arguments
    (``@function_tool(name="search")``).
    """

    def wrap(func: ToolHandler) -> StaticTool:
        model = _signature_model(func)
        schema = model.model_json_schema()
        schema.pop("title", None)
        spec = ToolSpec(
            name=name or func.__name__,
            description=description if description is not None else inspect.cleandoc(func.__doc__ or ""),
            parameters=schema,
        )
        return StaticTool(spec=spec, handler=func, args_model=model)

    if fn is not None:
        return wrap(fn)
    return wrap
