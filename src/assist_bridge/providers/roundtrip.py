"""Tool execution and summarization shared by every provider."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from assist_bridge.executor import ToolContext, ToolExecutor
from assist_bridge.registry import Provider
from assist_bridge.status import StatusCallback, notify
from assist_bridge.tools import TOOL_NAMES
from assist_bridge.types import ChatResponse, ResponseType, ToolInvocation, ToolResult

# Issues the provider's summarization call and returns its text.
Summarize = Callable[[ToolInvocation, ToolResult], Awaitable[str]]

SUMMARY_TEMPLATE = "Found {n} files matching your search."


class ToolRoundTrip:
    """
    Runs the requested tool, then asks the model to phrase the result.

    ``run`` returns None when the tool is not one of ours, so the caller falls
    back to the plain text reply.
    """

    def __init__(
        self,
        executor: Optional[ToolExecutor],
        *,
        provider: Provider,
        model: str,
        api_key: str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.executor = executor
        self.provider = provider
        self.model = model
        self.api_key = api_key
        self.logger = logger or logging.getLogger(__name__)

    async def run(
        self,
        invocation: ToolInvocation,
        user_message: str,
        summarize: Summarize,
        on_status: Optional[StatusCallback] = None,
    ) -> Optional[ChatResponse]:
        if self.executor is None or invocation.name not in TOOL_NAMES:
            return None

        context = ToolContext(
            provider=self.provider,
            api_key=self.api_key,
            model=self.model,
            user_message=user_message,
            on_status=on_status,
        )
        result = await self.executor.execute(invocation, context)
        if result is None:
            return None

        if result.is_error:
            # nothing worth summarizing
            return self._response(result.text or f"{invocation.name} failed", result)

        notify(on_status, "Summarizing results...")
        try:
            text = await summarize(invocation, result)
        except Exception as exc:
            self.logger.warning("Summary call failed, using template: %s", exc)
            text = ""

        if not text or not text.strip():
            text = SUMMARY_TEMPLATE.format(n=len(result.data))
        return self._response(text, result)

    def _response(self, text: str, result: ToolResult) -> ChatResponse:
        return ChatResponse(
            text=text,
            type=result.type,
            data=None if result.type == ResponseType.ERROR else result.data,
            provider=self.provider,
            model=self.model,
            search_info=result.search_info,
        )


__all__ = ["ToolRoundTrip", "Summarize", "SUMMARY_TEMPLATE"]
