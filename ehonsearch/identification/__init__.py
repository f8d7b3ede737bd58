"""
Identification Module

Catalog search and relevance scoring of the returned candidates.
"""

from ehonsearch.identification.gateway import (
    BookSearchGateway,
    GatewayError,
    GatewayErrorKind,
)
from ehonsearch.identification.google_books import GoogleBooksGateway
from ehonsearch.identification.isbn import is_valid_isbn, normalize_isbn
from ehonsearch.identification.scorer import (
    RelevanceScorer,
    select_auto_accept,
    analyze_results,
    AUTO_ACCEPT_THRESHOLD,
)

__all__ = [
    "BookSearchGateway",
    "GatewayError",
    "GatewayErrorKind",
    "GoogleBooksGateway",
    "is_valid_isbn",
    "normalize_isbn",
    "RelevanceScorer",
    "select_auto_accept",
    "analyze_results",
    "AUTO_ACCEPT_THRESHOLD",
]
