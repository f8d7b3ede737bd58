"""
Search Gateway

Abstract catalog search used by the orchestrator and batch pipeline.
Implementations raise GatewayError; callers never retry.
"""

from typing import Optional, Protocol, runtime_checkable

from ehonsearch.domain.models import Book
from ehonsearch.exceptions import (
    GATEWAY_ERROR_DESCRIPTIONS,
    GatewayError,
    GatewayErrorKind,
)


DEFAULT_MAX_RESULTS = 20


@runtime_checkable
class BookSearchGateway(Protocol):
    """Catalog search capability."""

    async def search_books(
        self,
        title: str,
        author: Optional[str] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[Book]:
        """
        Search the catalog by title and optional author.

        Args:
            title: Normalized title, may be empty
            author: Normalized author or None
            max_results: Upper bound on returned candidates

        Returns:
            Raw candidates in catalog order

        Raises:
            GatewayError: on any failure
        """
        ...

    async def search_book(self, isbn: str) -> Book:
        """Look up a single book by ISBN-10 or ISBN-13."""
        ...


__all__ = [
    "BookSearchGateway",
    "DEFAULT_MAX_RESULTS",
    "GATEWAY_ERROR_DESCRIPTIONS",
    "GatewayError",
    "GatewayErrorKind",
]
