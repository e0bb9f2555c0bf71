from __future__ import annotations

import logging
from typing import Any, Optional, Self

import httpx
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from assist_bridge._exceptions import provider_error
from assist_bridge.adapters.openai import OpenAIRequestAdapter, WireMessage
from assist_bridge.config import BridgeConfig
from assist_bridge.executor import ToolExecutor
from assist_bridge.prompts import system_prompt
from assist_bridge.providers.roundtrip import ToolRoundTrip
from assist_bridge.registry import Provider, display_name, supports_vision
from assist_bridge.status import StatusCallback, notify
from assist_bridge.types import ChatRequest, ChatResponse, ToolInvocation, ToolResult


class OpenAIProvider:
    """
    OpenAI chat completions with findFile / searchContent tools.

    Also drives any OpenAI-compatible server when given ``base_url``.
    Use ``OpenAIProvider.from_client`` when you already have an ``AsyncOpenAI`` instance.
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
        provider: Provider = Provider.OPENAI,
        base_url: Optional[str] = None,
        connect_label: str = "OpenAI",
        vision_label: Optional[str] = "GPT-4 Vision",
        image_detail: Optional[str] = "high",
    ) -> None:
        self.model = model
        self.config = config or BridgeConfig()
        self.provider = provider
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else display_name(provider)
        self.connect_label = connect_label
        self.vision_label = vision_label
        self.api_key = api_key

        client_kwargs: dict[str, Any] = {
            "api_key": api_key,
            "base_url": base_url or self.config.base_url_for(provider),
            "max_retries": self.config.max_retries,
        }
        if self.config.timeout is not None:
            client_kwargs["timeout"] = self.config.timeout
        if http_client is not None:
            client_kwargs["http_client"] = http_client
        self._client = AsyncOpenAI(**client_kwargs)
        # an injected transport belongs to the caller
        self._owns_client = http_client is None
        self._adapter = OpenAIRequestAdapter(image_detail)
        self._round_trip = ToolRoundTrip(
            executor, provider=provider, model=model, api_key=api_key, logger=self.logger
        )

    # Alternate constructor
    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncOpenAI,
        *,
        config: Optional[BridgeConfig] = None,
        executor: Optional[ToolExecutor] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Build an ``OpenAIProvider`` around an already-configured ``AsyncOpenAI`` client.

        The client is not closed by ``aclose``.
        """
        if not isinstance(client, AsyncOpenAI):
            raise TypeError(
                f"OpenAIProvider.from_client expects AsyncOpenAI; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        self.model = model
        self.config = config or BridgeConfig()
        self.provider = Provider.OPENAI
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else display_name(Provider.OPENAI)
        self.connect_label = "OpenAI"
        self.vision_label = "GPT-4 Vision"
        self.api_key = client.api_key
        self._client = client
        self._owns_client = False
        self._adapter = OpenAIRequestAdapter()
        self._round_trip = ToolRoundTrip(
            executor, provider=Provider.OPENAI, model=model, api_key=client.api_key,
            logger=self.logger,
        )
        return self

    async def converse(
        self,
        request: ChatRequest,
        on_status: Optional[StatusCallback] = None,
        *,
        use_tools: bool = True,
    ) -> ChatResponse:
        """One chat turn: initial call, then the tool round trip if a tool was requested."""
        notify(on_status, f"Connecting to {self.connect_label}...")
        prompt = system_prompt(self.provider, self.model, self.config.assistant_name)
        messages = self._adapter.build_messages(request, prompt)
        self._announce_images(request, on_status)

        params = self._adapter.build_params(
            self.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            with_tools=use_tools,
        )
        raw = await self._create(messages, params)

        invocation = self._adapter.parse_tool_call(raw) if use_tools else None
        if invocation is not None:
            self._log(f"Model requested tool {invocation.name}")

            async def summarize(call: ToolInvocation, result: ToolResult) -> str:
                follow_up = [
                    *messages,
                    self._adapter.assistant_message_from(raw, call),
                    self._adapter.tool_result_message(call, result),
                ]
                summary = await self._create(
                    follow_up,
                    self._adapter.build_params(
                        self.model,
                        temperature=self.config.summary_temperature,
                        max_tokens=self.config.summary_max_tokens,
                    ),
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
        """Single user-message call constrained to a JSON object."""
        params = self._adapter.build_params(
            self.model, temperature=temperature, max_tokens=max_tokens, json_mode=True
        )
        raw = await self._create([{"role": "user", "content": prompt}], params)
        return self._adapter.json_from(raw)

    async def _create(self, messages: list[WireMessage], params: dict[str, Any]) -> ChatCompletion:
        self._log(f"Sending request to {self.name} model {self.model}", logging.DEBUG)
        try:
            return await self._client.chat.completions.create(messages=messages, **params)
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
        suffix = f" with {self.vision_label}" if self.vision_label else ""
        notify(on_status, f"Analyzing {len(request.images)} image(s){suffix}...")

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


__all__ = ["OpenAIProvider"]
