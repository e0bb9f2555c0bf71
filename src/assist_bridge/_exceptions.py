"""
Translate noisy provider and transport tracebacks into a unified
`ProviderError`, while preserving the original exception for full tracebacks.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Optional, Type

import anthropic
import httpx
import openai

__all__: tuple[str, ...] = (
    "AssistBridgeError",
    "ConfigurationError",
    "ProviderError",
    "SearchBackendError",
    "ToolArgumentsError",
    "provider_error",
    "http_status_error",
    "error_message_from_body",
)


class AssistBridgeError(RuntimeError):
    """Base class for every error raised by assist_bridge."""


class ConfigurationError(AssistBridgeError):
    """No active provider, a missing key, or an unset custom endpoint."""


class SearchBackendError(AssistBridgeError):
    """The file search backend answered with a failure."""


class ToolArgumentsError(AssistBridgeError, ValueError):
    """A tool call carried arguments that are not a JSON object."""


class ProviderError(AssistBridgeError):
    """Public provider-level exception.

    Attributes:
        provider: Display name of the provider that failed.
        status_code: HTTP status when the provider answered, else None.
        original_exc: The underlying SDK or transport exception.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        status_code: Optional[int] = None,
        original_exc: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.original_exc = original_exc
        if original_exc is not None:
            self.__cause__ = original_exc


STATUS_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIStatusError,
    anthropic.APIStatusError,
)

CONN_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIConnectionError,
    anthropic.APIConnectionError,
    httpx.HTTPError,
    TimeoutError,
    ConnectionError,
)


def error_message_from_body(body: Any) -> Optional[str]:
    """Pull the provider's own message out of a decoded error body.

    OpenAI bodies arrive already unwrapped (``{"message": ...}``); Anthropic
    and Gemini keep the ``{"error": {"message": ...}}`` envelope.
    """
    if not isinstance(body, dict):
        return None
    inner = body.get("error", body)
    if isinstance(inner, dict) and inner.get("message"):
        return str(inner["message"])
    if isinstance(inner, str) and inner:
        return inner
    return None


def provider_error(
    exc: Exception,
    provider: str,
    logger: Optional[logging.Logger] = None,
) -> ProviderError:
    """Wrap an SDK or transport exception in ProviderError with a concise message."""
    log = logger or logging.getLogger("assist_bridge.exceptions")

    if isinstance(exc, ProviderError):
        return exc

    if isinstance(exc, STATUS_ERRORS):
        status = exc.status_code
        msg = error_message_from_body(exc.body) or f"{provider} API error: {status}"
        log.warning("%s answered %s: %s", provider, status, msg)
        return ProviderError(msg, provider=provider, status_code=status, original_exc=exc)

    if isinstance(exc, CONN_ERRORS):
        msg = f"{provider} request failed: {exc}"
    else:
        msg = f"{provider} error: {exc.__class__.__name__}: {exc}"

    log.warning(msg)
    return ProviderError(msg, provider=provider, original_exc=exc)


def http_status_error(response: httpx.Response, provider: str) -> ProviderError:
    """Build a ProviderError from a non-2xx response of a raw httpx call."""
    try:
        body = response.json()
    except ValueError:
        body = None
    msg = error_message_from_body(body) or f"{provider} API error: {response.status_code}"
    return ProviderError(msg, provider=provider, status_code=response.status_code)
