"""
Domain Module

Records flowing through the search-and-match pipeline.
"""

from ehonsearch.domain.models import (
    Book,
    BookSearchQuery,
    ScoredBook,
    ParsedBookEntry,
    SearchAnalysis,
    SearchQuality,
    KanaGroup,
    UNKNOWN_AUTHOR,
    DEFAULT_TARGET_AGE,
)

__all__ = [
    "Book",
    "BookSearchQuery",
    "ScoredBook",
    "ParsedBookEntry",
    "SearchAnalysis",
    "SearchQuality",
    "KanaGroup",
    "UNKNOWN_AUTHOR",
    "DEFAULT_TARGET_AGE",
]
