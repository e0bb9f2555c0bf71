"""Turn search backend payloads into SearchResult lists."""

from __future__ import annotations

import re
from typing import Final, Iterable, Optional

from assist_bridge.search.backend import BackendHit, BackendSearchResponse
from assist_bridge.types import SearchInfo, SearchResult

_SIZE_UNITS: Final = ("B", "KB", "MB", "GB")

# Checked in order; the first match wins and always beats the extension.
_PATH_CATEGORIES: Final[tuple[tuple[tuple[str, ...], str], ...]] = (
    (("node_modules", "target", ".git"), "Dev"),
    (("temp", "cache", "tmp"), "Temp"),
    (("system", "log"), "System"),
    (("document", "work"), "Work"),
    (("picture", "photo", "image"), "Personal"),
)

_EXTENSION_CATEGORIES: Final[dict[str, str]] = {
    **dict.fromkeys(("rs", "js", "ts", "py", "java", "cpp", "c"), "Dev"),
    **dict.fromkeys(("pdf", "doc", "docx", "txt", "md"), "Document"),
    **dict.fromkeys(("jpg", "png", "gif", "svg"), "Image"),
    **dict.fromkeys(("mp3", "wav", "mp4", "avi"), "Media"),
}

_PATH_SEPARATORS = re.compile(r"[/\\]")


def format_file_size(size: float) -> str:
    """Human-readable size, base 1024, one decimal: 1536 -> "1.5 KB"."""
    if size == 0:
        return "0 B"
    value = float(size)
    unit = 0
    while abs(value) >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        # whole bytes carry no decimal: 500 -> "500 B"
        return f"{round(value, 1):g} B"
    return f"{value:.1f} {_SIZE_UNITS[unit]}"


def file_name_from_path(path: str) -> str:
    return _PATH_SEPARATORS.split(path)[-1] or path


def _extension(name: str) -> str:
    _, dot, ext = name.rpartition(".")
    return ext.lower() if dot else ""


def detect_category(file_type: Optional[str], path: str) -> str:
    """Classify a file; path signals take precedence over the extension."""
    path_lower = path.lower()
    for needles, category in _PATH_CATEGORIES:
        if any(needle in path_lower for needle in needles):
            return category

    ext = (file_type or _extension(file_name_from_path(path))).lower().lstrip(".")
    return _EXTENSION_CATEGORIES.get(ext, "Other")


def parse_file_types(file_types: Optional[str | Iterable[str]]) -> list[str]:
    """``"pdf, .DOCX"`` -> ``["pdf", "docx"]``."""
    if not file_types:
        return []
    parts = file_types.split(",") if isinstance(file_types, str) else file_types
    return [p.strip().lower().lstrip(".") for p in parts if p and p.strip()]


def to_search_result(hit: BackendHit) -> SearchResult:
    name = file_name_from_path(hit.path)
    return SearchResult(
        id=hit.path,
        name=name,
        path=hit.path,
        size=format_file_size(hit.size) if hit.size else "Unknown",
        category=detect_category(hit.file_type, hit.path),
        last_used=str(hit.modified) if hit.modified else "Unknown",
        score=hit.relevance_score,
        source=hit.source_engine,
        snippet=hit.snippet,
        file_type=hit.file_type,
    )


def filter_by_extensions(
    files: list[SearchResult], file_types: Optional[str | Iterable[str]]
) -> list[SearchResult]:
    allowed = parse_file_types(file_types)
    if not allowed:
        return files
    return [f for f in files if f.extension in allowed]


def convert_results(
    payload: BackendSearchResponse,
    file_types: Optional[str | Iterable[str]] = None,
) -> tuple[list[SearchResult], SearchInfo]:
    """Convert a backend payload and apply the optional extension filter."""
    files = filter_by_extensions(
        [to_search_result(hit) for hit in payload.merged_results], file_types
    )
    info = SearchInfo(
        query=payload.query,
        total_results=len(files),
        execution_time=payload.total_execution_time_ms,
        mode=payload.mode,
        suggestions=list(payload.suggestions),
    )
    return files, info


__all__ = [
    "format_file_size",
    "file_name_from_path",
    "detect_category",
    "parse_file_types",
    "filter_by_extensions",
    "convert_results",
]
