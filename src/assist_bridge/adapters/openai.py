"""OpenAI adapter for pure request/response transformations."""

from __future__ import annotations

import json
from typing import Any, Optional

from openai.types.chat import ChatCompletion

from assist_bridge._exceptions import ToolArgumentsError
from assist_bridge.registry import requires_max_completion_tokens
from assist_bridge.tools import openai_tools
from assist_bridge.types import ChatMessage, ChatRequest, ImageAttachment, ToolInvocation, ToolResult

# Provider-native message
WireMessage = dict[str, Any]


class OpenAIRequestAdapter:
    """Adapter for converting between the internal request and OpenAI format.

    Also used for OpenAI-compatible custom endpoints.
    """

    def __init__(self, image_detail: Optional[str] = "high") -> None:
        # detail hint for images on the current message (better OCR)
        self.image_detail = image_detail

    def build_messages(self, request: ChatRequest, system_prompt: str) -> list[WireMessage]:
        """System prompt, then history, then the current user message."""
        messages: list[WireMessage] = [{"role": "system", "content": system_prompt}]
        messages.extend(self._history_message(m) for m in request.history)
        messages.append(
            self._content_message("user", request.message, request.images, self.image_detail)
        )
        return messages

    def _history_message(self, msg: ChatMessage) -> WireMessage:
        return self._content_message(msg.role.value, msg.content, msg.images, None)

    @staticmethod
    def _content_message(
        role: str,
        text: str,
        images: tuple[ImageAttachment, ...],
        detail: Optional[str],
    ) -> WireMessage:
        if not images:
            return {"role": role, "content": text}

        parts: list[dict[str, Any]] = [{"type": "text", "text": text}]
        for img in images:
            image_url: dict[str, Any] = {"url": img.data_url}
            if detail:
                image_url["detail"] = detail
            parts.append({"type": "image_url", "image_url": image_url})
        return {"role": role, "content": parts}

    def build_params(
        self,
        model: str,
        *,
        temperature: float,
        max_tokens: int,
        with_tools: bool = False,
        json_mode: bool = False,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"model": model, "temperature": temperature}

        # Handle max_tokens vs max_completion_tokens based on model
        if requires_max_completion_tokens(model):
            params["max_completion_tokens"] = max_tokens
        else:
            params["max_tokens"] = max_tokens

        if with_tools:
            params["tools"] = openai_tools()
            params["tool_choice"] = "auto"
        if json_mode:
            params["response_format"] = {"type": "json_object"}
        return params

    def parse_tool_call(self, raw: ChatCompletion) -> Optional[ToolInvocation]:
        """Return the first tool call, if any. Later calls in the turn are ignored."""
        message = self._message(raw)
        if message is None or not message.tool_calls:
            return None

        tc = message.tool_calls[0]
        function = getattr(tc, "function", None)
        if function is None:
            return None

        raw_args = function.arguments
        if isinstance(raw_args, dict):
            arguments = raw_args
        elif isinstance(raw_args, str) and raw_args.strip():
            try:
                arguments = json.loads(raw_args)
            except json.JSONDecodeError as exc:
                raise ToolArgumentsError(
                    f"Invalid arguments for tool {function.name}: {exc}"
                ) from exc
        else:
            arguments = {}

        if not isinstance(arguments, dict):
            raise ToolArgumentsError(
                f"Arguments for tool {function.name} must be a JSON object"
            )
        return ToolInvocation(name=function.name, arguments=arguments, id=tc.id)

    def text_from(self, raw: ChatCompletion) -> str:
        message = self._message(raw)
        return (message.content or "") if message is not None else ""

    def json_from(self, raw: ChatCompletion) -> dict[str, Any]:
        """Decode a ``json_object`` reply; raises ValueError when it is not an object."""
        data = json.loads(self.text_from(raw))
        if not isinstance(data, dict):
            raise ValueError("Model returned JSON that is not an object")
        return data

    def assistant_message_from(self, raw: ChatCompletion, invocation: ToolInvocation) -> WireMessage:
        """Assistant turn carrying only the honored tool call."""
        message = self._message(raw)
        tool_call = next(
            tc for tc in (message.tool_calls or []) if tc.id == invocation.id
        )
        return {
            "role": "assistant",
            # empty content must be sent as null alongside tool_calls
            "content": message.content or None,
            "tool_calls": [
                {
                    "id": tool_call.id,
                    "type": "function",
                    "function": {
                        "name": tool_call.function.name,
                        "arguments": tool_call.function.arguments,
                    },
                }
            ],
        }

    def tool_result_message(self, invocation: ToolInvocation, result: ToolResult) -> WireMessage:
        """Convert a ToolResult to an OpenAI tool message."""
        return {
            "role": "tool",
            "tool_call_id": invocation.id,
            "content": json.dumps(result.to_payload()),
        }

    @staticmethod
    def _message(raw: ChatCompletion):
        if raw.choices and raw.choices[0].message:
            return raw.choices[0].message
        return None
