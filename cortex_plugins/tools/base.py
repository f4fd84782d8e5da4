"""
Base classes for tool plugins.

Tools are self-contained actions that the host's model can request.
Each tool declares a JSON-schema descriptor and an asynchronous
handler that takes the argument mapping and always returns a
JSON-encoded string with a `success` flag. Tools are handed to a
host-owned `ToolRegistry` as (descriptor, handler) pairs.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, ClassVar, Dict, Protocol, TypeVar

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Awaitable[str]]

T = TypeVar("T")


def _empty_schema() -> Dict[str, Any]:
    return {"type": "object", "properties": {}, "required": []}


def to_json(payload: Dict[str, Any]) -> str:
    """Serialize a handler result the way the host expects it."""
    return json.dumps(payload, ensure_ascii=False, default=str)


@dataclass
class Tool:
    """
    Represents a tool that the agent host can invoke.

    Each tool has a name, a human-readable description, and a
    parameter schema. The `run` coroutine must be implemented by
    subclasses; it receives the raw argument mapping and returns a
    JSON string. Expected failures are encoded in that string as
    `{"success": false, "error": ...}` rather than raised.

    Subclasses set `tool_name`, the registered name, which is also the
    key of their section in the `tools` config.
    """

    tool_name: ClassVar[str] = ""

    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=_empty_schema)

    @property
    def definition(self) -> Dict[str, Any]:
        """The descriptor shape the host's model-calling layer consumes."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    async def run(self, tool_input: Dict[str, Any]) -> str:
        raise NotImplementedError

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Tool":
        raise NotImplementedError


class ToolRegistry(Protocol):
    """
    The registration surface supplied by the host.

    Storage and dispatch belong to the host; plugins only ever call
    `register` once per tool at initialization time.
    """

    def register(self, definition: Dict[str, Any], handler: Handler) -> None:
        ...


class FallbackPolicy:
    """
    Two-branch strategy: run the primary coroutine, and if it raises
    anything at all, log the reason and run the fallback instead.

    The error type is never inspected, so every failure of the
    primary path leads to the fallback.
    """

    def __init__(self, label: str) -> None:
        self.label = label

    async def run(
        self,
        primary: Callable[[], Awaitable[T]],
        fallback: Callable[[], Awaitable[T]],
    ) -> T:
        try:
            return await primary()
        except Exception as exc:  # noqa: BLE001
            logger.warning("%s: primary path failed, falling back: %s", self.label, exc)
            return await fallback()
