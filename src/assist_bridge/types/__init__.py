from .search import SearchInfo, SearchResult
from .chat import ChatMessage, ChatRequest, ChatResponse, ImageAttachment, ResponseType, Role
from .tool import ToolDefinition, ToolInvocation, ToolResult

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ImageAttachment",
    "ResponseType",
    "Role",
    "SearchInfo",
    "SearchResult",
    "ToolDefinition",
    "ToolInvocation",
    "ToolResult",
]
