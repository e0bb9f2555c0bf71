from __future__ import annotations

import logging
from typing import Callable, Optional

import httpx

from .config import BridgeConfig
from .executor import ToolExecutor
from .providers import (
    AnthropicProvider,
    CustomProvider,
    GeminiProvider,
    OpenAIProvider,
    ProviderAdapter,
)
from .registry import Provider

# map Provider enum to its adapter implementation
_ADAPTER_REGISTRY: dict[Provider, Callable[..., ProviderAdapter]] = {
    Provider.OPENAI: OpenAIProvider,
    Provider.GOOGLE: GeminiProvider,
    Provider.ANTHROPIC: AnthropicProvider,
    Provider.CUSTOM: CustomProvider,
}

# Signature shared by create_adapter and any replacement injected into the orchestrator.
AdapterFactory = Callable[..., ProviderAdapter]


def create_adapter(
    provider: Provider | str,
    model: str,
    *,
    api_key: str,
    config: Optional[BridgeConfig] = None,
    executor: Optional[ToolExecutor] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    logger: Optional[logging.Logger] = None,
) -> ProviderAdapter:
    """
    Factory for creating any supported provider adapter.

    Args:
        provider: Which provider to use (openai, google, anthropic, custom).
        model: Model identifier (e.g. "gpt-4o-mini").
        api_key: Key loaded from the credential store.
        config: Temperatures, token limits, endpoints; defaults to ``BridgeConfig()``.
        executor: Runs tool calls. Without one, tool requests fall through to
            the model's text reply (scoring adapters are built this way).
        http_client: Optional caller-owned ``httpx.AsyncClient``; never closed
            by the adapter.
        logger: Optional custom logger.
    """
    try:
        adapter_cls = _ADAPTER_REGISTRY[Provider(provider)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unsupported provider: {provider}") from exc

    return adapter_cls(
        model,
        api_key=api_key,
        config=config,
        executor=executor,
        http_client=http_client,
        logger=logger,
    )


__all__ = ["create_adapter", "AdapterFactory"]
