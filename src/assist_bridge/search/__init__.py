from .backend import BackendHit, BackendSearchResponse, HttpSearchBackend, SearchBackend
from .convert import (
    convert_results,
    detect_category,
    file_name_from_path,
    filter_by_extensions,
    format_file_size,
    parse_file_types,
)

__all__ = [
    "BackendHit",
    "BackendSearchResponse",
    "HttpSearchBackend",
    "SearchBackend",
    "convert_results",
    "detect_category",
    "file_name_from_path",
    "filter_by_extensions",
    "format_file_size",
    "parse_file_types",
]
