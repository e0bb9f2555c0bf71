"""File search results as seen by the model and by callers."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class SearchResult:
    """
    One file returned by a search tool.

    ``score`` is the backend's own estimate (0-1). ``relevance_score`` (0-100)
    and ``score_reason`` are only filled in by the relevance scorer.
    """

    id: str
    name: str
    path: str
    size: str
    category: str
    last_used: str
    score: Optional[float] = None
    source: Optional[str] = None
    snippet: Optional[str] = None
    file_type: Optional[str] = None
    relevance_score: Optional[int] = None
    score_reason: Optional[str] = None

    @property
    def extension(self) -> str:
        _, dot, ext = self.name.rpartition(".")
        return ext.lower() if dot else ""

    def with_relevance(self, score: int, reason: str) -> "SearchResult":
        return dataclasses.replace(self, relevance_score=score, score_reason=reason)

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in dataclasses.asdict(self).items() if v is not None}


@dataclass(slots=True)
class SearchInfo:
    """Diagnostic metadata about one search; not needed for correctness."""

    query: Optional[str] = None
    total_results: int = 0
    execution_time: Optional[float] = None
    mode: Optional[str] = None
    original_results: Optional[int] = None
    filter_reason: Optional[str] = None
    suggestions: list[str | dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in dataclasses.asdict(self).items() if v is not None}
