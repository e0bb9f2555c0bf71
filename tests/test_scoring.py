"""Tests for relevance scoring and its keyword fallback."""

import asyncio

from assist_bridge.registry import Provider
from assist_bridge.scoring import (
    MAX_RESULTS,
    RelevanceScorer,
    ScoringResponse,
    apply_scores,
    fallback_scores,
)
from assist_bridge.types import SearchResult

from fakes import FakeCompleter, completer_factory


def make_file(path: str, score=None, source=None) -> SearchResult:
    name = path.rsplit("/", 1)[-1]
    return SearchResult(
        id=path, name=name, path=path, size="1.0 KB", category="Other",
        last_used="Unknown", score=score, source=source,
    )


FILES = [
    make_file("/docs/resume.pdf"),
    make_file("/docs/my_resume_2023.docx"),
    make_file("/resume/cover.pdf"),
    make_file("/other/holiday.jpg"),
]


class TestFallbackScores:
    def test_keyword_rules(self):
        scored = {f.name: f for f in fallback_scores(FILES, "resume, cv")}

        assert scored["resume.pdf"].relevance_score == 95
        assert scored["resume.pdf"].score_reason == "Exact match"
        assert scored["my_resume_2023.docx"].relevance_score == 85
        assert scored["cover.pdf"].relevance_score == 70
        # floor score of 50 still passes the threshold
        assert scored["holiday.jpg"].relevance_score == 50

    def test_sorted_descending(self):
        scores = [f.relevance_score for f in fallback_scores(FILES, "resume")]
        assert scores == sorted(scores, reverse=True)

    def test_backend_score_takes_precedence(self):
        files = [make_file("/x/unrelated.txt", score=0.874, source="fuzzy")]
        [scored] = fallback_scores(files, "resume")
        assert scored.relevance_score == 87
        assert scored.score_reason == "via fuzzy"

    def test_backend_score_without_source(self):
        [scored] = fallback_scores([make_file("/x/a.txt", score=0.6)], "a")
        assert scored.score_reason == "Backend score"

    def test_low_backend_score_is_dropped(self):
        assert fallback_scores([make_file("/x/a.txt", score=0.2)], "a") == []

    def test_blank_keywords_are_ignored(self):
        [scored] = fallback_scores([make_file("/x/holiday.jpg")], "resume, ,")
        assert scored.score_reason == "Keyword match"

    def test_truncates_to_fifteen(self):
        files = [make_file(f"/docs/resume{i}.pdf") for i in range(40)]
        assert len(fallback_scores(files, "resume")) == MAX_RESULTS

    def test_deterministic(self):
        first = fallback_scores(FILES, "resume,cv")
        second = fallback_scores(FILES, "resume,cv")
        assert first == second


class TestApplyScores:
    def test_threshold_and_top_results(self):
        response = ScoringResponse.model_validate(
            {
                "scores": [
                    {"index": 0, "score": 92, "reason": "exact"},
                    {"index": 1, "score": 30, "reason": "weak"},
                    {"index": 2, "score": 10, "reason": "noise"},
                ],
                "top_results": [1],
            }
        )

        kept = apply_scores(FILES, response)

        assert [f.name for f in kept] == ["resume.pdf", "my_resume_2023.docx"]
        assert kept[1].relevance_score == 30

    def test_unscored_files_get_zero(self):
        response = ScoringResponse.model_validate({"scores": [], "top_results": [3]})
        [kept] = apply_scores(FILES, response)
        assert kept.name == "holiday.jpg"
        assert kept.relevance_score == 0
        assert kept.score_reason == "Not scored"

    def test_first_entry_per_index_wins(self):
        response = ScoringResponse.model_validate(
            {"scores": [{"index": 0, "score": 80}, {"index": 0, "score": 10}]}
        )
        [kept] = apply_scores(FILES, response)
        assert kept.relevance_score == 80

    def test_scores_are_clamped(self):
        response = ScoringResponse.model_validate({"scores": [{"index": 0, "score": 140.6}]})
        [kept] = apply_scores(FILES, response)
        assert kept.relevance_score == 100


class TestRelevanceScorer:
    def test_llm_scores_used(self):
        completer = FakeCompleter(
            {"scores": [{"index": 1, "score": 88, "reason": "good"}], "top_results": [1]}
        )
        factory = completer_factory(completer)
        statuses = []

        result = asyncio.run(
            RelevanceScorer(factory).score(
                FILES, "find my resume", "resume", Provider.OPENAI, "sk-test", "gpt-4o-mini",
                on_status=statuses.append,
            )
        )

        assert [f.name for f in result] == ["my_resume_2023.docx"]
        assert factory.opened == [(Provider.OPENAI, "gpt-4o-mini", "sk-test")]
        assert completer.kwargs == [{"temperature": 0.3, "max_tokens": 2048}]
        assert "find my resume" in completer.prompts[0]
        assert '1. "my_resume_2023.docx" - /docs/my_resume_2023.docx' in completer.prompts[0]
        assert statuses == ["Scoring 4 results for relevance..."]

    def test_failure_falls_back_to_keywords(self):
        scorer = RelevanceScorer(completer_factory(FakeCompleter(error=TimeoutError("slow"))))

        result = asyncio.run(
            scorer.score(FILES, "find my resume", "resume", Provider.OPENAI, "k", "m")
        )

        assert result == fallback_scores(FILES, "resume")

    def test_malformed_reply_falls_back(self):
        scorer = RelevanceScorer(completer_factory(FakeCompleter({"top_results": [0]})))

        result = asyncio.run(scorer.score(FILES, "resume", "resume", Provider.GOOGLE, "k", "m"))

        assert result[0].score_reason == "Exact match"

    def test_empty_input_skips_the_call(self):
        factory = completer_factory(FakeCompleter({"scores": []}))

        result = asyncio.run(
            RelevanceScorer(factory).score([], "x", "x", Provider.OPENAI, "k", "m")
        )

        assert result == []
        assert factory.opened == []
