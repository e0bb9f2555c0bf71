"""
Provider-neutral dataclasses for client-side tool use.

They are intentionally minimal: everything provider-specific lives in adapters.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from assist_bridge.types.chat import ResponseType
from assist_bridge.types.search import SearchInfo, SearchResult

__all__ = ["ToolDefinition", "ToolInvocation", "ToolResult"]


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    """Canonical tool shape; ``parameters`` is a JSON Schema object."""
    name: str
    description: str
    parameters: dict[str, Any]


@dataclass(slots=True)
class ToolInvocation:
    """A model-agnostic request emitted by the LLM to call a local tool."""
    name: str
    arguments: dict[str, Any]
    id: Optional[str] = None     # provider call id, when the dialect has one


@dataclass(slots=True)
class ToolResult:
    """What a tool produced; sent back to the LLM for the summarization call."""
    type: ResponseType
    data: list[SearchResult] = field(default_factory=list)
    search_info: Optional[SearchInfo] = None
    text: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.type == ResponseType.ERROR

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.type.value,
            "data": [item.to_dict() for item in self.data],
        }
        if self.search_info is not None:
            payload["searchInfo"] = self.search_info.to_dict()
        if self.text:
            payload["text"] = self.text
        return payload
