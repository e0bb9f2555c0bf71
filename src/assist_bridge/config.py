"""
Explicit configuration passed into the orchestrator and every adapter.

Contract
- Values are plain fields on a frozen dataclass; nothing is shared or mutated
  between concurrent callers. Use ``replace`` to derive a modified copy.
- ``from_env`` reads ``ASSIST_*`` variables (a ``.env`` file is honored).

Variables
  ASSIST_CUSTOM_ENDPOINT   base URL of an OpenAI-compatible server
  ASSIST_CUSTOM_MODEL      model used when no saved model exists
  ASSIST_TEMPERATURE       float, default 0.7
  ASSIST_MAX_TOKENS        int, default 4096
  ASSIST_TIMEOUT           seconds; unset keeps the HTTP client defaults
  ASSIST_MAX_RETRIES       int, default 0
  ASSIST_ASSISTANT_NAME    name the model introduces itself with
  ASSIST_SEARCH_URL        file search backend, default http://localhost:3001
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from .registry import PROVIDERS, Provider

load_dotenv()

_ENV_PREFIX = "ASSIST_"


@dataclass(frozen=True)
class BridgeConfig:
    """Settings for one orchestrator instance."""

    custom_endpoint: Optional[str] = None
    custom_model: Optional[str] = None

    # First call
    temperature: float = 0.7
    max_tokens: int = 4096

    # Summarization call
    summary_temperature: float = 0.7
    summary_max_tokens: int = 1024

    # Relevance scoring call
    scoring_temperature: float = 0.3
    scoring_max_tokens: int = 2048

    # Transport; None keeps the SDK/httpx defaults
    timeout: Optional[float] = None
    max_retries: int = 0

    assistant_name: str = "Skhoot"
    search_url: str = "http://localhost:3001"

    # Per-provider base URL overrides (e.g. a proxy)
    base_urls: Mapping[Provider, str] = field(default_factory=dict)

    def base_url_for(self, provider: Provider) -> str:
        if provider == Provider.CUSTOM:
            return self.custom_endpoint or ""
        return self.base_urls.get(provider) or PROVIDERS[provider].base_url

    def replace(self, **changes: Any) -> "BridgeConfig":
        """Return a copy with *changes* applied."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            value = env.get(_ENV_PREFIX + name)
            return value if value else None

        kwargs: dict[str, Any] = {
            "custom_endpoint": get("CUSTOM_ENDPOINT"),
            "custom_model": get("CUSTOM_MODEL"),
        }
        converters = {
            "temperature": ("TEMPERATURE", float),
            "max_tokens": ("MAX_TOKENS", int),
            "timeout": ("TIMEOUT", float),
            "max_retries": ("MAX_RETRIES", int),
            "assistant_name": ("ASSISTANT_NAME", str),
            "search_url": ("SEARCH_URL", str),
        }
        for attr, (name, convert) in converters.items():
            value = get(name)
            if value is not None:
                kwargs[attr] = convert(value)
        return cls(**kwargs)


__all__ = ["BridgeConfig"]
