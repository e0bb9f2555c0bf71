from __future__ import annotations

import logging
from typing import Any, Optional, Self

import httpx
from anthropic import AsyncAnthropic
from anthropic.types import Message

from assist_bridge._exceptions import provider_error
from assist_bridge.adapters.anthropic import JSON_ONLY_SUFFIX, AnthropicRequestAdapter
from assist_bridge.config import BridgeConfig
from assist_bridge.executor import ToolExecutor
from assist_bridge.prompts import system_prompt
from assist_bridge.providers.roundtrip import ToolRoundTrip
from assist_bridge.registry import Provider, display_name, supports_vision
from assist_bridge.status import StatusCallback, notify
from assist_bridge.types import ChatRequest, ChatResponse, ToolInvocation, ToolResult


class AnthropicProvider:
    """
    Anthropic Messages API with tool use (async-only).

    Use ``AnthropicProvider.from_client`` when you already have an ``AsyncAnthropic`` instance.
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
        base_url: Optional[str] = None,
    ) -> None:
        self.model = model
        self.config = config or BridgeConfig()
        self.provider = Provider.ANTHROPIC
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else display_name(Provider.ANTHROPIC)
        self.api_key = api_key

        client_kwargs: dict[str, Any] = {
            "api_key": api_key,
            "base_url": base_url or self.config.base_url_for(Provider.ANTHROPIC),
            "max_retries": self.config.max_retries,
        }
        if self.config.timeout is not None:
            client_kwargs["timeout"] = self.config.timeout
        if http_client is not None:
            client_kwargs["http_client"] = http_client
        self._client = AsyncAnthropic(**client_kwargs)
        self._owns_client = http_client is None
        self._adapter = AnthropicRequestAdapter()
        self._round_trip = ToolRoundTrip(
            executor, provider=Provider.ANTHROPIC, model=model, api_key=api_key,
            logger=self.logger,
        )

    # Alternate constructor
    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncAnthropic,
        *,
        config: Optional[BridgeConfig] = None,
        executor: Optional[ToolExecutor] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Build an ``AnthropicProvider`` around an already-configured ``AsyncAnthropic`` client.
        """
        if not isinstance(client, AsyncAnthropic):
            raise TypeError(
                f"AnthropicProvider.from_client expects AsyncAnthropic; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        self.model = model
        self.config = config or BridgeConfig()
        self.provider = Provider.ANTHROPIC
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else display_name(Provider.ANTHROPIC)
        self.api_key = client.api_key or ""
        self._client = client
        self._owns_client = False
        self._adapter = AnthropicRequestAdapter()
        self._round_trip = ToolRoundTrip(
            executor, provider=Provider.ANTHROPIC, model=model, api_key=self.api_key,
            logger=self.logger,
        )
        return self

    async def converse(
        self,
        request: ChatRequest,
        on_status: Optional[StatusCallback] = None,
    ) -> ChatResponse:
        """One chat turn: initial call, then the tool round trip if a tool was requested."""
        notify(on_status, "Connecting to Anthropic Claude...")
        prompt = system_prompt(self.provider, self.model, self.config.assistant_name)
        system, messages = self._adapter.build_messages(request, prompt)
        self._announce_images(request, on_status)

        raw = await self._create(
            self._adapter.build_params(
                self.model,
                system,
                messages,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                with_tools=True,
            )
        )

        invocation = self._adapter.parse_tool_call(raw)
        if invocation is not None:
            self._log(f"Model requested tool {invocation.name}")

            async def summarize(call: ToolInvocation, result: ToolResult) -> str:
                follow_up = [
                    *messages,
                    self._adapter.assistant_message_from(raw, call),
                    self._adapter.tool_result_message(call, result),
                ]
                summary = await self._create(
                    self._adapter.build_params(
                        self.model,
                        system,
                        follow_up,
                        temperature=self.config.summary_temperature,
                        max_tokens=self.config.summary_max_tokens,
                        disable_tools=True,
                    )
                )
                return self._adapter.text_from(summary)

            response = await self._round_trip.run(
                invocation, request.message, summarize, on_status
            )
            if response is not None:
                return response

        return ChatResponse(
            text=self._adapter.text_from(raw), provider=self.provider, model=self.model
        )

    async def complete_json(
        self, prompt: str, *, temperature: float, max_tokens: int
    ) -> dict[str, Any]:
        """Free-text call; the first ``{...}`` span of the reply is decoded."""
        raw = await self._create(
            self._adapter.build_params(
                self.model,
                "",
                [{"role": "user", "content": prompt + JSON_ONLY_SUFFIX}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        )
        return self._adapter.json_from(raw)

    async def _create(self, params: dict[str, Any]) -> Message:
        self._log(f"Sending request to {self.name} model {self.model}", logging.DEBUG)
        try:
            return await self._client.messages.create(**params)
        except Exception as exc:
            raise provider_error(exc, self.name, self.logger) from exc

    def _announce_images(self, request: ChatRequest, on_status: Optional[StatusCallback]) -> None:
        if not request.images:
            return
        if not supports_vision(self.model):
            self._log(
                f"Model {self.model} is not known to support images; sending them anyway",
                logging.WARNING,
            )
        notify(on_status, f"Analyzing {len(request.images)} image(s) with Claude Vision...")

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """Close the SDK client unless it was supplied by the caller. Safe to call twice."""
        if self._owns_client:
            await self._client.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["AnthropicProvider"]
