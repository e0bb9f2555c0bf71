from __future__ import annotations

import logging
from typing import Any, Optional, Self

import httpx

from assist_bridge._exceptions import ConfigurationError, ProviderError
from assist_bridge.config import BridgeConfig
from assist_bridge.executor import ToolExecutor
from assist_bridge.providers.openai import OpenAIProvider
from assist_bridge.registry import Provider, display_name
from assist_bridge.status import StatusCallback
from assist_bridge.types import ChatRequest, ChatResponse


class CustomProvider:
    """
    An OpenAI-compatible server (Ollama, LM Studio, vLLM, ...) at ``config.custom_endpoint``.

    Many such servers reject ``tools``; when the tool-augmented call fails the
    turn is retried once as plain chat.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        config: Optional[BridgeConfig] = None,
        executor: Optional[ToolExecutor] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        self.config = config or BridgeConfig()
        endpoint = self.config.custom_endpoint
        if not endpoint:
            raise ConfigurationError(
                "Custom endpoint not configured. Please set it in User Profile."
            )

        self.model = model
        self.provider = Provider.CUSTOM
        self.endpoint = endpoint.rstrip("/")
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else display_name(Provider.CUSTOM)
        self._inner = OpenAIProvider(
            model,
            api_key=api_key,
            config=self.config,
            executor=executor,
            http_client=http_client,
            logger=self.logger,
            name=self.name,
            provider=Provider.CUSTOM,
            base_url=self.endpoint,
            connect_label=self.endpoint,
            vision_label=None,
            image_detail=None,
        )

    async def converse(
        self,
        request: ChatRequest,
        on_status: Optional[StatusCallback] = None,
    ) -> ChatResponse:
        try:
            return await self._inner.converse(request, on_status)
        except ProviderError as exc:
            self._log(f"Tool call failed ({exc}); retrying without tools", logging.WARNING)
        return await self._inner.converse(request, on_status, use_tools=False)

    async def complete_json(
        self, prompt: str, *, temperature: float, max_tokens: int
    ) -> dict[str, Any]:
        return await self._inner.complete_json(
            prompt, temperature=temperature, max_tokens=max_tokens
        )

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    async def aclose(self) -> None:
        await self._inner.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["CustomProvider"]
