"""Runs the findFile / searchContent tools against the search backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Final, Mapping, Optional

from .activity import ActivityLog, ActivityStatus, LoggingActivityLog
from .registry import Provider
from .scoring import RelevanceScorer
from .search import BackendSearchResponse, SearchBackend, convert_results
from .search.convert import parse_file_types
from .status import StatusCallback, notify
from .tools import FIND_FILE, SEARCH_CONTENT
from .types import ResponseType, ToolInvocation, ToolResult

CONTENT_SEARCH_LIMIT: Final = 20

FIND_FILE_OPTIONS: Final[dict[str, Any]] = {
    "mode": "hybrid",
    "max_results": 100,
    "include_indices": True,
}


@dataclass(frozen=True, slots=True)
class ToolContext:
    """Who is asking: used to score results with the same provider and model."""

    provider: Provider
    api_key: str
    model: str
    user_message: str
    on_status: Optional[StatusCallback] = None


@dataclass(frozen=True, slots=True)
class _SearchArgs:
    query: str
    file_types: Optional[str]
    search_path: Optional[str]

    @classmethod
    def parse(cls, args: Mapping[str, Any]) -> "_SearchArgs":
        file_types = args.get("file_types")
        if file_types and not isinstance(file_types, str):
            file_types = ",".join(parse_file_types(file_types))
        return cls(
            query=str(args.get("query") or "").strip(),
            file_types=file_types or None,
            search_path=str(args["search_path"]) if args.get("search_path") else None,
        )

    def backend_options(self, base: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        options = dict(base or {})
        if self.file_types:
            options["file_types"] = self.file_types
        if self.search_path:
            options["search_path"] = self.search_path
        return options


class ToolExecutor:
    """
    Executes tool invocations and converts backend results to SearchResults.

    Never raises for backend problems: failures come back as a ToolResult of
    type ``error``. Every invocation is written to the activity log.
    """

    def __init__(
        self,
        backend: SearchBackend,
        scorer: RelevanceScorer,
        *,
        activity_log: Optional[ActivityLog] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.backend = backend
        self.scorer = scorer
        self.activity_log = activity_log or LoggingActivityLog()
        self.logger = logger or logging.getLogger(__name__)

    async def execute(
        self, invocation: ToolInvocation, context: ToolContext
    ) -> Optional[ToolResult]:
        """Dispatch by tool name; unknown tools return None."""
        if invocation.name == FIND_FILE:
            return await self.find_file(invocation.arguments, context)
        if invocation.name == SEARCH_CONTENT:
            return await self.search_content(invocation.arguments, context)
        self.logger.warning("Ignoring call to unknown tool %r", invocation.name)
        return None

    async def find_file(self, args: Mapping[str, Any], context: ToolContext) -> ToolResult:
        parsed = _SearchArgs.parse(args)
        self.logger.info("Executing file search: %s", parsed)
        notify(context.on_status, f'Searching for "{parsed.query}"...')

        summary = parsed.query + (f" in {parsed.search_path}" if parsed.search_path else "")
        try:
            raw = await self.backend.ai_file_search(
                parsed.query, parsed.backend_options(FIND_FILE_OPTIONS)
            )
            files, info = convert_results(
                BackendSearchResponse.model_validate(raw), parsed.file_types
            )
        except Exception as exc:
            self.logger.exception("File search failed")
            self._record("File Search", summary, "Search failed", ActivityStatus.ERROR)
            return ToolResult(type=ResponseType.ERROR, text=f"File search failed: {exc}")

        scored = await self.scorer.score(
            files,
            context.user_message or parsed.query,
            parsed.query,
            context.provider,
            context.api_key,
            context.model,
            on_status=context.on_status,
        )
        info.original_results = len(files)
        info.total_results = len(scored)
        info.filter_reason = (
            f"AI scored {len(files)} files, showing {len(scored)} relevant results"
        )

        self._record(
            "File Search",
            summary,
            f"Found {len(scored)} relevant files ({len(files)} total)",
            ActivityStatus.SUCCESS,
            {"executionTime": info.execution_time},
        )
        return ToolResult(type=ResponseType.FILE_LIST, data=scored, search_info=info)

    async def search_content(self, args: Mapping[str, Any], context: ToolContext) -> ToolResult:
        parsed = _SearchArgs.parse(args)
        self.logger.info("Executing content search: %s", parsed)
        notify(context.on_status, f'Searching content for "{parsed.query}"...')

        try:
            raw = await self.backend.search_content(parsed.query, parsed.backend_options())
            files, info = convert_results(
                BackendSearchResponse.model_validate(raw), parsed.file_types
            )
        except Exception as exc:
            self.logger.exception("Content search failed")
            self._record(
                "Content Search", parsed.query, "Search failed", ActivityStatus.ERROR
            )
            return ToolResult(type=ResponseType.ERROR, text=f"Content search failed: {exc}")

        self._record(
            "Content Search",
            parsed.query,
            f"Found {len(files)} files",
            ActivityStatus.SUCCESS,
            {"executionTime": info.execution_time},
        )
        return ToolResult(
            type=ResponseType.FILE_LIST, data=files[:CONTENT_SEARCH_LIMIT], search_info=info
        )

    def _record(self, *args: Any) -> None:
        # activity logging is fire-and-forget
        try:
            self.activity_log.record(*args)
        except Exception:
            self.logger.exception("Activity log rejected %s record", args[0])


__all__ = ["ToolExecutor", "ToolContext"]
