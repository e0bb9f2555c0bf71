"""
Relevance scoring of file search results.

A secondary, low-temperature LLM call grades each candidate 0-100. Any
failure of that call (transport, malformed JSON, missing ``scores``) falls
back to ``fallback_scores``, a deterministic keyword match that never
touches the network.
"""

from __future__ import annotations

import logging
import math
from typing import Any, AsyncContextManager, Callable, Final, Optional, Protocol, Sequence

from pydantic import BaseModel, Field

from .prompts import scoring_prompt
from .registry import Provider
from .status import StatusCallback, notify
from .types import SearchResult

MAX_RESULTS: Final = 15
RELEVANCE_THRESHOLD: Final = 50

EXACT_MATCH_SCORE: Final = 95
NAME_MATCH_SCORE: Final = 85
PATH_MATCH_SCORE: Final = 70
FLOOR_SCORE: Final = 50


class ScoreEntry(BaseModel):
    index: int
    score: float = 0
    reason: str = ""


class ScoringResponse(BaseModel):
    scores: list[ScoreEntry]
    top_results: list[int] = Field(default_factory=list)


class JSONCompleter(Protocol):
    async def complete_json(
        self, prompt: str, *, temperature: float, max_tokens: int
    ) -> dict[str, Any]: ...


# (provider, model, api_key) -> async context manager yielding a completer
CompleterFactory = Callable[[Provider, str, str], AsyncContextManager[JSONCompleter]]


def _percent(value: float) -> int:
    """Round half up and clamp to 0..100."""
    return max(0, min(100, int(math.floor(value + 0.5))))


def _rank(files: list[SearchResult]) -> list[SearchResult]:
    return sorted(files, key=lambda f: f.relevance_score or 0, reverse=True)[:MAX_RESULTS]


def apply_scores(files: Sequence[SearchResult], response: ScoringResponse) -> list[SearchResult]:
    """Merge model scores by index, keep score >= 50 or top_results, best first."""
    by_index: dict[int, ScoreEntry] = {}
    for entry in response.scores:
        by_index.setdefault(entry.index, entry)
    top = set(response.top_results)

    kept: list[SearchResult] = []
    for i, f in enumerate(files):
        entry = by_index.get(i)
        scored = f.with_relevance(
            _percent(entry.score) if entry else 0,
            (entry.reason if entry else "") or "Not scored",
        )
        if scored.relevance_score >= RELEVANCE_THRESHOLD or i in top:
            kept.append(scored)
    return _rank(kept)


def fallback_scores(files: Sequence[SearchResult], search_query: str) -> list[SearchResult]:
    """Deterministic scoring from the backend score or keyword overlap."""
    keywords = [k.strip() for k in search_query.lower().split(",") if k.strip()]

    def score_one(f: SearchResult) -> SearchResult:
        if f.score is not None and f.score > 0:
            return f.with_relevance(
                _percent(f.score * 100), f"via {f.source}" if f.source else "Backend score"
            )

        name = f.name.lower()
        path = f.path.lower()
        if any(name == kw or name.startswith(kw + ".") for kw in keywords):
            return f.with_relevance(EXACT_MATCH_SCORE, "Exact match")
        if any(kw in name for kw in keywords):
            return f.with_relevance(NAME_MATCH_SCORE, "Name match")
        if any(kw in path for kw in keywords):
            return f.with_relevance(PATH_MATCH_SCORE, "Path match")
        return f.with_relevance(FLOOR_SCORE, "Keyword match")

    scored = [score_one(f) for f in files]
    return _rank([f for f in scored if (f.relevance_score or 0) >= RELEVANCE_THRESHOLD])


class RelevanceScorer:
    """Scores search results with the same provider/model that is chatting."""

    def __init__(
        self,
        completer_factory: CompleterFactory,
        *,
        temperature: float = 0.3,
        max_tokens: int = 2048,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._completer_factory = completer_factory
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.logger = logger or logging.getLogger(__name__)

    async def score(
        self,
        files: Sequence[SearchResult],
        user_message: str,
        search_query: str,
        provider: Provider,
        api_key: str,
        model: str,
        on_status: Optional[StatusCallback] = None,
    ) -> list[SearchResult]:
        """Return at most 15 files, each with relevance_score set, best first."""
        if not files:
            return list(files)

        notify(on_status, f"Scoring {len(files)} results for relevance...")
        self.logger.info("Scoring %d results with %s (%s)", len(files), provider, model)

        prompt = scoring_prompt(files, user_message, search_query)
        try:
            async with self._completer_factory(provider, model, api_key) as completer:
                raw = await completer.complete_json(
                    prompt, temperature=self.temperature, max_tokens=self.max_tokens
                )
            parsed = ScoringResponse.model_validate(raw)
        except Exception as exc:
            # scoring only improves ranking; never surface its failure
            self.logger.warning("Relevance scoring failed, using keyword fallback: %s", exc)
            return fallback_scores(files, search_query)

        self.logger.debug(
            "Scoring returned %d scores, %d top results",
            len(parsed.scores),
            len(parsed.top_results),
        )
        return apply_scores(files, parsed)


__all__ = [
    "RelevanceScorer",
    "ScoringResponse",
    "apply_scores",
    "fallback_scores",
    "MAX_RESULTS",
]
