"""
Top-level entry point: resolve the active provider and run one chat turn.

``ChatOrchestrator.chat`` never raises. Missing configuration and provider
failures come back as a ``ChatResponse`` of type ``error``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ._exceptions import ConfigurationError
from .activity import ActivityLog
from .config import BridgeConfig
from .credentials import CredentialStore
from .executor import ToolExecutor
from .factory import AdapterFactory, create_adapter
from .providers import ProviderAdapter
from .registry import Provider, display_name, resolve_model
from .registry import default_model as _default_model
from .registry import models_for as _models_for
from .scoring import RelevanceScorer
from .search import SearchBackend
from .status import StatusCallback, notify
from .types import ChatMessage, ChatRequest, ChatResponse, ImageAttachment, ResponseType

NO_PROVIDER_MESSAGE = (
    "No AI provider configured. Please add an API key in User Profile → API Configuration."
)


class ChatOrchestrator:
    """
    Wires credentials, the search backend and the provider adapters together.

    Example:
        orchestrator = ChatOrchestrator(EnvCredentialStore(), HttpSearchBackend(url))
        response = await orchestrator.chat("find my resume")
    """

    def __init__(
        self,
        credentials: CredentialStore,
        search_backend: SearchBackend,
        *,
        config: Optional[BridgeConfig] = None,
        activity_log: Optional[ActivityLog] = None,
        adapter_factory: Optional[AdapterFactory] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.credentials = credentials
        self.config = config or BridgeConfig()
        self.logger = logger or logging.getLogger(__name__)
        self._adapter_factory = adapter_factory or create_adapter

        self.scorer = RelevanceScorer(
            self._scoring_adapter,
            temperature=self.config.scoring_temperature,
            max_tokens=self.config.scoring_max_tokens,
            logger=self.logger.getChild("scoring"),
        )
        self.executor = ToolExecutor(
            search_backend,
            self.scorer,
            activity_log=activity_log,
            logger=self.logger.getChild("tools"),
        )

    def _scoring_adapter(self, provider: Provider, model: str, api_key: str) -> ProviderAdapter:
        # no executor: the scoring call must never trigger tools
        return self._adapter_factory(provider, model, api_key=api_key, config=self.config)

    async def chat(
        self,
        message: str,
        history: Sequence[ChatMessage | dict[str, Any]] = (),
        on_status: Optional[StatusCallback] = None,
        images: Optional[Sequence[ImageAttachment]] = None,
    ) -> ChatResponse:
        """Run one turn against the active provider. Never raises."""
        try:
            provider = self.credentials.get_active_provider()
        except ConfigurationError as exc:
            self.logger.warning("Active provider unreadable: %s", exc)
            provider = None
        except Exception:
            self.logger.exception("Credential store failed to report the active provider")
            provider = None
        if provider is None:
            return ChatResponse(text=NO_PROVIDER_MESSAGE, type=ResponseType.ERROR)

        notify(on_status, f"Using {provider}...")

        try:
            if not self.credentials.has_key(provider):
                return ChatResponse(
                    text=(
                        f"No API key configured for {display_name(provider)}. "
                        "Please add one in User Profile → API Configuration."
                    ),
                    type=ResponseType.ERROR,
                    provider=provider,
                )
            api_key = self.credentials.load_key(provider)
            model = resolve_model(provider, self.credentials.load_model(provider), self.config)
            request = ChatRequest.build(message, history, images)

            self.logger.info("Chat turn with %s (%s)", provider, model)
            async with self._adapter_factory(
                provider,
                model,
                api_key=api_key,
                config=self.config,
                executor=self.executor,
            ) as adapter:
                return await adapter.converse(request, on_status)
        except Exception as exc:
            self.logger.exception("Chat failed with %s", provider)
            return ChatResponse(
                text=f"Error with {provider}: {exc}",
                type=ResponseType.ERROR,
                provider=provider,
            )

    def models_for(self, provider: Provider | str) -> list[str]:
        return _models_for(provider)

    def default_model(self, provider: Provider | str) -> str:
        return _default_model(provider)


__all__ = ["ChatOrchestrator", "NO_PROVIDER_MESSAGE"]
