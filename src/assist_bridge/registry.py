from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final, Optional

if TYPE_CHECKING:
    from .config import BridgeConfig


class Provider(StrEnum):
    OPENAI = "openai"
    GOOGLE = "google"
    ANTHROPIC = "anthropic"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class ProviderInfo:
    """Static catalog entry for one provider."""

    id: Provider
    name: str
    base_url: str
    default_model: str
    models: tuple[str, ...] = ()


PROVIDERS: Final[dict[Provider, ProviderInfo]] = {
    Provider.OPENAI: ProviderInfo(
        id=Provider.OPENAI,
        name="OpenAI",
        base_url="https://api.openai.com/v1",
        default_model="gpt-4o-mini",
        models=("gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-3.5-turbo"),
    ),
    Provider.GOOGLE: ProviderInfo(
        id=Provider.GOOGLE,
        name="Google",
        base_url="https://generativelanguage.googleapis.com/v1beta",
        default_model="gemini-2.0-flash",
        models=("gemini-2.0-flash", "gemini-1.5-pro", "gemini-1.5-flash"),
    ),
    Provider.ANTHROPIC: ProviderInfo(
        id=Provider.ANTHROPIC,
        name="Anthropic",
        # the SDK appends /v1/messages
        base_url="https://api.anthropic.com",
        default_model="claude-3-5-sonnet-20241022",
        models=(
            "claude-3-5-sonnet-20241022",
            "claude-3-opus-20240229",
            "claude-3-haiku-20240307",
        ),
    ),
    Provider.CUSTOM: ProviderInfo(
        id=Provider.CUSTOM,
        name="Custom",
        base_url="",
        default_model="",
    ),
}

# Model used against a custom endpoint when nothing else is configured.
CUSTOM_FALLBACK_MODEL: Final = "default"

VISION_MODELS: Final[tuple[str, ...]] = (
    "gpt-4o",
    "gpt-4o-mini",
    "gpt-4-turbo",
    "gpt-4-vision-preview",
    "gemini-2.0-flash",
    "gemini-1.5-pro",
    "gemini-1.5-flash",
    "claude-3-5-sonnet-20241022",
    "claude-3-opus-20240229",
    "claude-3-haiku-20240307",
)

_MAX_COMPLETION_TOKENS_PREFIXES: Final[tuple[str, ...]] = ("gpt-5", "o1", "o3", "o4")


def get_provider_info(provider: Provider | str) -> ProviderInfo:
    """Return the catalog entry for *provider* or raise ValueError."""
    try:
        return PROVIDERS[Provider(provider)]
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported provider: {provider}") from None


def display_name(provider: Provider | str) -> str:
    return get_provider_info(provider).name


def default_model(provider: Provider | str) -> str:
    return get_provider_info(provider).default_model


def models_for(provider: Provider | str) -> list[str]:
    return list(get_provider_info(provider).models)


def supports_vision(model: str) -> bool:
    """
    Whether *model* is on the vision allow-list.

    Case-insensitive substring match, so versioned names such as
    ``gpt-4o-2024-08-06`` qualify. This is the only place that decides vision
    support; swap it for a capability lookup without touching the adapters.
    """
    lowered = model.lower()
    return any(vm in lowered for vm in VISION_MODELS)


def requires_max_completion_tokens(model: str) -> bool:
    """Check if model requires max_completion_tokens instead of max_tokens."""
    return any(model.startswith(prefix) for prefix in _MAX_COMPLETION_TOKENS_PREFIXES)


def resolve_model(
    provider: Provider,
    saved: Optional[str],
    config: "BridgeConfig",
) -> str:
    """Pick the model for a call: saved choice, configured override, catalog default."""
    if saved:
        return saved
    if config.custom_model:
        return config.custom_model
    return default_model(provider) or CUSTOM_FALLBACK_MODEL


__all__ = [
    "Provider",
    "ProviderInfo",
    "PROVIDERS",
    "VISION_MODELS",
    "get_provider_info",
    "display_name",
    "default_model",
    "models_for",
    "supports_vision",
    "requires_max_completion_tokens",
    "resolve_model",
]
