"""
Assist Bridge - one chat interface over OpenAI, Gemini, Anthropic and
OpenAI-compatible servers, with file search tools.
"""

from ._exceptions import (
    AssistBridgeError,
    ConfigurationError,
    ProviderError,
    SearchBackendError,
    ToolArgumentsError,
)
from .activity import ActivityRecord, ActivityStatus, LoggingActivityLog, MemoryActivityLog
from .config import BridgeConfig
from .credentials import CredentialStore, EnvCredentialStore, StaticCredentialStore
from .executor import ToolContext, ToolExecutor
from .factory import create_adapter
from .orchestrator import ChatOrchestrator
from .providers import (
    AnthropicProvider,
    CustomProvider,
    GeminiProvider,
    OpenAIProvider,
    ProviderAdapter,
)
from .registry import Provider, ProviderInfo, get_provider_info, supports_vision
from .scoring import RelevanceScorer, fallback_scores
from .search import HttpSearchBackend, SearchBackend, format_file_size
from .types import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ImageAttachment,
    ResponseType,
    Role,
    SearchInfo,
    SearchResult,
    ToolInvocation,
    ToolResult,
)

__version__ = "0.1.0"

__all__ = [
    "ChatOrchestrator",
    "BridgeConfig",
    "Provider",
    "ProviderInfo",
    "get_provider_info",
    "supports_vision",
    "CredentialStore",
    "EnvCredentialStore",
    "StaticCredentialStore",
    "ProviderAdapter",
    "OpenAIProvider",
    "GeminiProvider",
    "AnthropicProvider",
    "CustomProvider",
    "create_adapter",
    "ToolExecutor",
    "ToolContext",
    "RelevanceScorer",
    "fallback_scores",
    "SearchBackend",
    "HttpSearchBackend",
    "format_file_size",
    "ActivityRecord",
    "ActivityStatus",
    "LoggingActivityLog",
    "MemoryActivityLog",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ImageAttachment",
    "ResponseType",
    "Role",
    "SearchInfo",
    "SearchResult",
    "ToolInvocation",
    "ToolResult",
    "AssistBridgeError",
    "ConfigurationError",
    "ProviderError",
    "SearchBackendError",
    "ToolArgumentsError",
]
