"""The two callable tools and their per-provider schema dialects."""

from __future__ import annotations

from typing import Any, Final

from .types import ToolDefinition

FIND_FILE: Final = "findFile"
SEARCH_CONTENT: Final = "searchContent"

FIND_FILE_TOOL = ToolDefinition(
    name=FIND_FILE,
    description=(
        "Find a file on the user computer using natural language keywords. Use this "
        "when the user asks to find, locate, search for files, or asks \"where is\" something."
    ),
    parameters={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "File name, partial name, or content keywords to search for.",
            },
            "file_types": {
                "type": "string",
                "description": (
                    "Optional comma-separated file extensions like \"rs,js,py\" "
                    "to filter by file type."
                ),
            },
            "search_path": {
                "type": "string",
                "description": (
                    "Optional folder path to search in, e.g. \"Downloads\", "
                    "\"Documents\", \"Desktop\"."
                ),
            },
        },
        "required": ["query"],
    },
)

SEARCH_CONTENT_TOOL = ToolDefinition(
    name=SEARCH_CONTENT,
    description=(
        "Search inside file contents for specific text, code, or patterns. Use when "
        "user wants to find files containing specific content."
    ),
    parameters={
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "Text or code pattern to search for inside files.",
            },
            "file_types": {
                "type": "string",
                "description": "Optional comma-separated file extensions to search within.",
            },
            "search_path": {
                "type": "string",
                "description": "Optional folder path to search in.",
            },
        },
        "required": ["query"],
    },
)

TOOLS: Final[tuple[ToolDefinition, ...]] = (FIND_FILE_TOOL, SEARCH_CONTENT_TOOL)
TOOL_NAMES: Final[frozenset[str]] = frozenset(tool.name for tool in TOOLS)


def openai_tools() -> list[dict[str, Any]]:
    """OpenAI / OpenAI-compatible function schema."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters,
            },
        }
        for tool in TOOLS
    ]


def anthropic_tools() -> list[dict[str, Any]]:
    """Anthropic tool-use schema."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "input_schema": tool.parameters,
        }
        for tool in TOOLS
    ]


def gemini_tools() -> list[dict[str, Any]]:
    """Gemini ``functionDeclarations`` with the upper-case type dialect."""
    return [
        {
            "functionDeclarations": [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": to_gemini_schema(tool.parameters),
                }
                for tool in TOOLS
            ]
        }
    ]


def to_gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Rewrite a JSON Schema so every ``type`` uses Gemini's OBJECT/STRING spelling."""
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type" and isinstance(value, str):
            converted[key] = value.upper()
        elif key == "properties" and isinstance(value, dict):
            converted[key] = {name: to_gemini_schema(sub) for name, sub in value.items()}
        elif key == "items" and isinstance(value, dict):
            converted[key] = to_gemini_schema(value)
        else:
            converted[key] = value
    return converted


__all__ = [
    "FIND_FILE",
    "SEARCH_CONTENT",
    "TOOLS",
    "TOOL_NAMES",
    "openai_tools",
    "anthropic_tools",
    "gemini_tools",
    "to_gemini_schema",
]
