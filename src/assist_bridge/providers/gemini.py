from __future__ import annotations

import logging
from typing import Any, Final, Optional, Self

import httpx

from assist_bridge._exceptions import http_status_error, provider_error
from assist_bridge.adapters.gemini import GeminiRequestAdapter, GenerateResponse, WireContent
from assist_bridge.config import BridgeConfig
from assist_bridge.executor import ToolExecutor
from assist_bridge.prompts import system_prompt
from assist_bridge.providers.roundtrip import ToolRoundTrip
from assist_bridge.registry import Provider, display_name, supports_vision
from assist_bridge.status import StatusCallback, notify
from assist_bridge.types import ChatRequest, ChatResponse, ToolInvocation, ToolResult

# Used when BridgeConfig.timeout is unset; httpx's own 5s default is too short for generation.
DEFAULT_TIMEOUT: Final = 60.0


class GeminiProvider:
    """
    Google Gemini over the ``generateContent`` REST endpoint.

    The SDK-free path keeps ``functionCall`` / ``inlineData`` parts intact.
    Use ``GeminiProvider.from_client`` to share an ``httpx.AsyncClient``.
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
        self.provider = Provider.GOOGLE
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else display_name(Provider.GOOGLE)
        self.api_key = api_key
        self.base_url = (base_url or self.config.base_url_for(Provider.GOOGLE)).rstrip("/")

        if http_client is None:
            timeout = self.config.timeout if self.config.timeout is not None else DEFAULT_TIMEOUT
            self._client = httpx.AsyncClient(timeout=timeout)
            self._owns_client = True
        else:
            self._client = http_client
            self._owns_client = False
        self._adapter = GeminiRequestAdapter()
        self._round_trip = ToolRoundTrip(
            executor, provider=Provider.GOOGLE, model=model, api_key=api_key, logger=self.logger
        )

    # Alternate constructor
    @classmethod
    def from_client(
        cls,
        model: str,
        client: httpx.AsyncClient,
        *,
        api_key: str,
        config: Optional[BridgeConfig] = None,
        executor: Optional[ToolExecutor] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """Build a ``GeminiProvider`` on a caller-owned ``httpx.AsyncClient``."""
        if not isinstance(client, httpx.AsyncClient):
            raise TypeError(
                f"GeminiProvider.from_client expects httpx.AsyncClient; got {type(client).__name__}"
            )
        return cls(
            model,
            api_key=api_key,
            config=config,
            executor=executor,
            http_client=client,
            logger=logger,
            name=name,
        )

    async def converse(
        self,
        request: ChatRequest,
        on_status: Optional[StatusCallback] = None,
    ) -> ChatResponse:
        """One chat turn: initial call, then the tool round trip if a tool was requested."""
        notify(on_status, "Connecting to Google Gemini...")
        prompt = system_prompt(self.provider, self.model, self.config.assistant_name)
        system_instruction, contents = self._adapter.build_contents(request, prompt)
        self._announce_images(request, on_status)

        raw = await self._generate(
            self._adapter.build_body(
                system_instruction,
                contents,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                with_tools=True,
            )
        )

        invocation = self._adapter.parse_tool_call(raw)
        if invocation is not None:
            self._log(f"Model requested tool {invocation.name}")

            async def summarize(call: ToolInvocation, result: ToolResult) -> str:
                follow_up: list[WireContent] = [
                    *contents,
                    self._adapter.assistant_message_from(raw, call),
                    self._adapter.tool_result_message(call, result),
                ]
                summary = await self._generate(
                    self._adapter.build_body(
                        system_instruction,
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
        """Single user turn with ``responseMimeType: application/json``."""
        body = self._adapter.build_body(
            "",
            [{"role": "user", "parts": [{"text": prompt}]}],
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=True,
        )
        return self._adapter.json_from(await self._generate(body))

    async def _generate(self, body: dict[str, Any]) -> GenerateResponse:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        self._log(f"Sending request to {self.name} model {self.model}", logging.DEBUG)
        try:
            response = await self._client.post(url, params={"key": self.api_key}, json=body)
        except Exception as exc:
            raise provider_error(exc, self.name, self.logger) from exc

        if response.is_error:
            raise http_status_error(response, self.name)
        try:
            return response.json()
        except ValueError as exc:
            raise provider_error(exc, self.name, self.logger) from exc

    def _announce_images(self, request: ChatRequest, on_status: Optional[StatusCallback]) -> None:
        if not request.images:
            return
        if not supports_vision(self.model):
            self._log(
                f"Model {self.model} is not known to support images; sending them anyway",
                logging.WARNING,
            )
        notify(on_status, f"Analyzing {len(request.images)} image(s) with Gemini Vision...")

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """Close the HTTP client unless it was supplied by the caller. Safe to call twice."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["GeminiProvider"]
