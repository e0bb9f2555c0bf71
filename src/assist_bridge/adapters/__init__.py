"""Pure transformation adapters for the supported provider dialects."""

from .openai import OpenAIRequestAdapter
from .anthropic import AnthropicRequestAdapter
from .gemini import GeminiRequestAdapter

__all__ = [
    "OpenAIRequestAdapter",
    "AnthropicRequestAdapter",
    "GeminiRequestAdapter",
]
