"""Provider adapters: one class per wire protocol, all with the same surface."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Self

from assist_bridge.status import StatusCallback
from assist_bridge.types import ChatRequest, ChatResponse

from .anthropic import AnthropicProvider
from .custom import CustomProvider
from .gemini import GeminiProvider
from .openai import OpenAIProvider
from .roundtrip import SUMMARY_TEMPLATE, ToolRoundTrip


class ProviderAdapter(Protocol):
    """What the orchestrator and the relevance scorer need from a provider."""

    async def converse(
        self, request: ChatRequest, on_status: Optional[StatusCallback] = None
    ) -> ChatResponse: ...

    async def complete_json(
        self, prompt: str, *, temperature: float, max_tokens: int
    ) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...

    async def __aenter__(self) -> Self: ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...


__all__ = [
    "ProviderAdapter",
    "OpenAIProvider",
    "GeminiProvider",
    "AnthropicProvider",
    "CustomProvider",
    "ToolRoundTrip",
    "SUMMARY_TEMPLATE",
]
