import json
from typing import Any, Dict, List, Tuple

import pytest


class RecordingRegistry:
    """Stand-in for the host registry: records every registration."""

    def __init__(self) -> None:
        self.registered: List[Tuple[Dict[str, Any], Any]] = []

    def register(self, definition, handler) -> None:
        self.registered.append((definition, handler))

    def names(self) -> List[str]:
        return [d["function"]["name"] for d, _ in self.registered]

    def handler(self, name: str):
        for definition, handler in self.registered:
            if definition["function"]["name"] == name:
                return handler
        raise KeyError(name)


@pytest.fixture
def registry():
    return RecordingRegistry()


async def call(tool, **kwargs) -> Dict[str, Any]:
    """Run a tool handler and decode its JSON result."""
    raw = await tool.run(kwargs)
    assert isinstance(raw, str)
    return json.loads(raw)
