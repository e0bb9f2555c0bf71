"""Credential lookup: which provider is active, its key and saved model."""

from __future__ import annotations

import os
from typing import Final, Mapping, Optional, Protocol

from dotenv import load_dotenv

from ._exceptions import ConfigurationError
from .registry import Provider

load_dotenv()

ACTIVE_PROVIDER_VAR: Final = "ASSIST_PROVIDER"

_KEY_VARS: Final[dict[Provider, tuple[str, ...]]] = {
    Provider.OPENAI: ("OPENAI_API_KEY",),
    Provider.GOOGLE: ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    Provider.ANTHROPIC: ("ANTHROPIC_API_KEY",),
    Provider.CUSTOM: ("CUSTOM_API_KEY",),
}

_MODEL_VARS: Final[dict[Provider, str]] = {
    Provider.OPENAI: "OPENAI_MODEL",
    Provider.GOOGLE: "GOOGLE_MODEL",
    Provider.ANTHROPIC: "ANTHROPIC_MODEL",
    Provider.CUSTOM: "CUSTOM_MODEL",
}


class CredentialStore(Protocol):
    """Supplies per-provider API keys and the currently active provider."""

    def get_active_provider(self) -> Optional[Provider]: ...

    def has_key(self, provider: Provider) -> bool: ...

    def load_key(self, provider: Provider) -> str: ...

    def load_model(self, provider: Provider) -> Optional[str]: ...


class EnvCredentialStore:
    """Reads the active provider, keys and models from environment variables."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._env = os.environ if environ is None else environ

    def get_active_provider(self) -> Optional[Provider]:
        raw = (self._env.get(ACTIVE_PROVIDER_VAR) or "").strip().lower()
        if not raw:
            return None
        try:
            return Provider(raw)
        except ValueError:
            raise ConfigurationError(
                f"{ACTIVE_PROVIDER_VAR}={raw!r} is not one of "
                f"{', '.join(p.value for p in Provider)}"
            ) from None

    def has_key(self, provider: Provider) -> bool:
        return self._lookup_key(provider) is not None

    def load_key(self, provider: Provider) -> str:
        """Return the API key for *provider* or raise ConfigurationError."""
        key = self._lookup_key(provider)
        if key is None:
            names = " or ".join(_KEY_VARS[Provider(provider)])
            raise ConfigurationError(f"{names} missing")
        return key

    def load_model(self, provider: Provider) -> Optional[str]:
        return self._env.get(_MODEL_VARS[Provider(provider)]) or None

    def _lookup_key(self, provider: Provider) -> Optional[str]:
        for name in _KEY_VARS[Provider(provider)]:
            value = self._env.get(name)
            if value:
                return value
        return None


class StaticCredentialStore:
    """In-memory credentials for embedding applications and tests."""

    def __init__(
        self,
        keys: Optional[Mapping[Provider, str]] = None,
        *,
        active: Optional[Provider] = None,
        models: Optional[Mapping[Provider, str]] = None,
    ) -> None:
        self._keys = {Provider(p): k for p, k in (keys or {}).items() if k}
        self._models = {Provider(p): m for p, m in (models or {}).items() if m}
        self._active = Provider(active) if active else None

    def get_active_provider(self) -> Optional[Provider]:
        return self._active

    def has_key(self, provider: Provider) -> bool:
        return Provider(provider) in self._keys

    def load_key(self, provider: Provider) -> str:
        try:
            return self._keys[Provider(provider)]
        except KeyError:
            raise ConfigurationError(f"No API key stored for {provider!s}") from None

    def load_model(self, provider: Provider) -> Optional[str]:
        return self._models.get(Provider(provider))


__all__ = ["CredentialStore", "EnvCredentialStore", "StaticCredentialStore"]
