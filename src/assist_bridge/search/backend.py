"""
The external file search backend.

This package never touches the filesystem; every file fact comes from a
``SearchBackend``. ``HttpSearchBackend`` talks to the indexing service's
``/api/v1/search`` routes.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from assist_bridge._exceptions import SearchBackendError


class BackendHit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str
    size: Optional[float] = None
    modified: Optional[str | int | float] = None
    relevance_score: Optional[float] = None
    source_engine: Optional[str] = None
    snippet: Optional[str] = None
    file_type: Optional[str] = None


class BackendSearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    merged_results: list[BackendHit] = Field(default_factory=list)
    query: Optional[str] = None
    total_execution_time_ms: Optional[float] = None
    mode: Optional[str] = None
    # plain strings or {suggestion, reason, confidence} objects
    suggestions: list[str | dict[str, Any]] = Field(default_factory=list)

    @field_validator("merged_results", "suggestions", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class SearchBackend(Protocol):
    """Narrow query interface of the indexing service."""

    async def ai_file_search(self, query: str, options: Mapping[str, Any]) -> Mapping[str, Any]: ...

    async def search_content(self, query: str, options: Mapping[str, Any]) -> Mapping[str, Any]: ...


class HttpSearchBackend:
    """``SearchBackend`` over HTTP using httpx."""

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        *,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.logger = logger or logging.getLogger(__name__)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else httpx.Timeout(30.0)
        )

    async def ai_file_search(self, query: str, options: Mapping[str, Any]) -> Mapping[str, Any]:
        return await self._get("/api/v1/search/files", query, options, "AI file search")

    async def search_content(self, query: str, options: Mapping[str, Any]) -> Mapping[str, Any]:
        return await self._get("/api/v1/search/content", query, options, "Content search")

    async def _get(
        self, route: str, query: str, options: Mapping[str, Any], label: str
    ) -> Mapping[str, Any]:
        params: dict[str, str] = {"q": query}
        for key, value in options.items():
            if value is None or value is False or value == "":
                continue
            params[key] = "true" if value is True else str(value)

        self.logger.debug("GET %s%s params=%s", self.base_url, route, params)
        response = await self._client.get(f"{self.base_url}{route}", params=params)
        if response.is_error:
            raise SearchBackendError(f"{label} failed: {response.reason_phrase or response.status_code}")
        return response.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpSearchBackend":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["BackendHit", "BackendSearchResponse", "SearchBackend", "HttpSearchBackend"]
