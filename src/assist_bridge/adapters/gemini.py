"""Gemini adapter for pure request/response transformations (REST generateContent)."""

from __future__ import annotations

import json
from typing import Any, Optional

from assist_bridge.tools import gemini_tools
from assist_bridge.types import ChatRequest, ImageAttachment, Role, ToolInvocation, ToolResult

# Provider-native content entry, e.g. {"role": "user", "parts": [...]}
WireContent = dict[str, Any]
GenerateResponse = dict[str, Any]

_ROLES = {Role.USER: "user", Role.ASSISTANT: "model"}


class GeminiRequestAdapter:
    """Adapter for converting between the internal request and the Gemini REST body."""

    def build_contents(self, request: ChatRequest, system_prompt: str) -> tuple[str, list[WireContent]]:
        """Return the system instruction text and the ``contents`` list.

        History ``system`` turns have no Gemini role and are folded into the
        system instruction.
        """
        system_parts = [system_prompt]
        contents: list[WireContent] = []
        for msg in request.history:
            if msg.role == Role.SYSTEM:
                system_parts.append(msg.content)
                continue
            contents.append(self._content(_ROLES[msg.role], msg.content, msg.images))
        contents.append(self._content("user", request.message, request.images))
        return "\n\n".join(system_parts), contents

    @staticmethod
    def _content(role: str, text: str, images: tuple[ImageAttachment, ...]) -> WireContent:
        parts: list[dict[str, Any]] = [{"text": text}]
        parts.extend(
            {"inlineData": {"mimeType": img.mime_type, "data": img.base64}} for img in images
        )
        return {"role": role, "parts": parts}

    def build_body(
        self,
        system_instruction: str,
        contents: list[WireContent],
        *,
        temperature: float,
        max_tokens: int,
        with_tools: bool = False,
        disable_tools: bool = False,
        json_mode: bool = False,
    ) -> dict[str, Any]:
        generation_config: dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"

        body: dict[str, Any] = {"contents": contents, "generationConfig": generation_config}
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if with_tools or disable_tools:
            # history holding functionCall parts needs the declarations present
            body["tools"] = gemini_tools()
        if disable_tools:
            body["toolConfig"] = {"functionCallingConfig": {"mode": "NONE"}}
        return body

    def parse_tool_call(self, raw: GenerateResponse) -> Optional[ToolInvocation]:
        """Return the first ``functionCall`` part, if any."""
        for part in self._parts(raw):
            call = part.get("functionCall")
            if call:
                args = call.get("args") or {}
                return ToolInvocation(name=call.get("name", ""), arguments=dict(args), id=call.get("id"))
        return None

    def text_from(self, raw: GenerateResponse) -> str:
        return "".join(part["text"] for part in self._parts(raw) if part.get("text"))

    def json_from(self, raw: GenerateResponse) -> dict[str, Any]:
        """Decode a JSON-mode reply; raises ValueError when it is not an object."""
        data = json.loads(self.text_from(raw))
        if not isinstance(data, dict):
            raise ValueError("Gemini returned JSON that is not an object")
        return data

    def assistant_message_from(self, raw: GenerateResponse, invocation: ToolInvocation) -> WireContent:
        """Model turn as returned, keeping only the first ``functionCall`` part.

        Parts are reused as-is so fields such as ``thoughtSignature`` survive.
        """
        parts: list[dict[str, Any]] = []
        seen_call = False
        for part in self._parts(raw):
            if "functionCall" in part:
                if seen_call:
                    continue
                seen_call = True
            parts.append(part)
        return {"role": "model", "parts": parts}

    def tool_result_message(self, invocation: ToolInvocation, result: ToolResult) -> WireContent:
        """Convert a ToolResult to a ``functionResponse`` part."""
        response: dict[str, Any] = {"name": invocation.name, "response": result.to_payload()}
        if invocation.id:
            response["id"] = invocation.id
        return {"role": "user", "parts": [{"functionResponse": response}]}

    @staticmethod
    def _parts(raw: GenerateResponse) -> list[dict[str, Any]]:
        candidates = raw.get("candidates") or []
        if not candidates:
            return []
        content = candidates[0].get("content") or {}
        return list(content.get("parts") or [])
