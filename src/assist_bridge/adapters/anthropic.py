"""Anthropic adapter for pure request/response transformations."""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from anthropic.types import Message

from assist_bridge.tools import anthropic_tools
from assist_bridge.types import ChatRequest, ImageAttachment, Role, ToolInvocation, ToolResult

# Provider-native message
WireMessage = dict[str, Any]

# Anthropic has no JSON mode; take the outermost {...} span of the reply.
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

JSON_ONLY_SUFFIX = "\n\nRespond with valid JSON only."


class AnthropicRequestAdapter:
    """Adapter for converting between the internal request and Anthropic format."""

    def build_messages(self, request: ChatRequest, system_prompt: str) -> tuple[str, list[WireMessage]]:
        """Return the top-level ``system`` text and the ``messages`` list.

        History ``system`` turns are not a valid Anthropic role and are folded
        into the system text.
        """
        system_parts = [system_prompt]
        messages: list[WireMessage] = []
        for msg in request.history:
            if msg.role == Role.SYSTEM:
                system_parts.append(msg.content)
                continue
            messages.append(self._message(msg.role.value, msg.content, msg.images))
        messages.append(self._message("user", request.message, request.images))
        return "\n\n".join(system_parts), messages

    @staticmethod
    def _message(role: str, text: str, images: tuple[ImageAttachment, ...]) -> WireMessage:
        if not images:
            return {"role": role, "content": text}

        content: list[dict[str, Any]] = [
            {
                "type": "image",
                "source": {"type": "base64", "media_type": img.mime_type, "data": img.base64},
            }
            for img in images
        ]
        content.append({"type": "text", "text": text})
        return {"role": role, "content": content}

    def build_params(
        self,
        model: str,
        system: str,
        messages: list[WireMessage],
        *,
        temperature: float,
        max_tokens: int,
        with_tools: bool = False,
        disable_tools: bool = False,
    ) -> dict[str, Any]:
        # Anthropic requires max_tokens
        params: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }
        if system:
            params["system"] = system
        if with_tools or disable_tools:
            # tool_use blocks in the history are rejected unless tools are declared
            params["tools"] = anthropic_tools()
        if disable_tools:
            params["tool_choice"] = {"type": "none"}
        return params

    def parse_tool_call(self, raw: Message) -> Optional[ToolInvocation]:
        """Return the first ``tool_use`` block, if any."""
        for block in raw.content or []:
            if block.type == "tool_use":
                arguments = dict(block.input) if hasattr(block.input, "items") else {}
                return ToolInvocation(name=block.name, arguments=arguments, id=block.id)
        return None

    def text_from(self, raw: Message) -> str:
        return "".join(block.text for block in raw.content or [] if block.type == "text")

    def json_from(self, raw: Message) -> dict[str, Any]:
        """Extract the JSON object embedded in a free-text reply; ValueError if absent."""
        match = _JSON_OBJECT.search(self.text_from(raw))
        if match is None:
            raise ValueError("No JSON object in Anthropic response")
        data = json.loads(match.group(0))
        if not isinstance(data, dict):
            raise ValueError("Anthropic returned JSON that is not an object")
        return data

    def assistant_message_from(self, raw: Message, invocation: ToolInvocation) -> WireMessage:
        """Assistant turn with its text and only the honored ``tool_use`` block."""
        content: list[dict[str, Any]] = []
        for block in raw.content or []:
            if block.type == "text":
                content.append({"type": "text", "text": block.text})
            elif block.type == "tool_use" and block.id == invocation.id:
                content.append(
                    {
                        "type": "tool_use",
                        "id": block.id,
                        "name": block.name,
                        "input": dict(block.input) if hasattr(block.input, "items") else {},
                    }
                )
        return {"role": "assistant", "content": content}

    def tool_result_message(self, invocation: ToolInvocation, result: ToolResult) -> WireMessage:
        """Convert a ToolResult to an Anthropic ``tool_result`` block."""
        return {
            "role": "user",
            "content": [
                {
                    "type": "tool_result",
                    "tool_use_id": invocation.id,
                    "content": json.dumps(result.to_payload()),
                }
            ],
        }
