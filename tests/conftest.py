"""
Pytest configuration and fixtures for ehonsearch tests.
"""

import asyncio
from typing import Optional

import pytest

from ehonsearch.config import Settings
from ehonsearch.domain.models import Book
from ehonsearch.exceptions import GatewayError, GatewayErrorKind
from ehonsearch.identification.scorer import RelevanceScorer
from ehonsearch.registration.orchestrator import SearchOrchestrator
from ehonsearch.storage.repository import BookRepository
from ehonsearch.text.normalizer import StringNormalizer


# =============================================================================
# Test Settings
# =============================================================================

def get_test_settings() -> Settings:
    """Return settings configured for testing."""
    return Settings(
        database_url="sqlite:///:memory:",
        google_books_api_key=None,
        max_results=20,
        batch_entry_timeout=0.5,
    )


@pytest.fixture
def settings() -> Settings:
    return get_test_settings()


# =============================================================================
# Fake Gateway
# =============================================================================

class FakeGateway:
    """
    In-memory search gateway.

    Results are looked up by the title the gateway receives. A title with
    no entry raises BOOK_NOT_FOUND, like the real catalog.
    """

    def __init__(self, results: Optional[dict[str, list[Book]]] = None):
        self.results = results or {}
        self.error: Optional[Exception] = None
        self.calls: list[tuple[str, Optional[str], int]] = []

        # Titles whose search blocks until the event is set
        self.blocked: dict[str, asyncio.Event] = {}

    async def search_books(self, title, author=None, max_results=20):
        self.calls.append((title, author, max_results))

        if title in self.blocked:
            await self.blocked[title].wait()

        if self.error is not None:
            raise self.error

        if title not in self.results:
            raise GatewayError(GatewayErrorKind.BOOK_NOT_FOUND)

        return list(self.results[title])

    async def search_book(self, isbn):
        raise GatewayError(GatewayErrorKind.BOOK_NOT_FOUND)


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def repository() -> BookRepository:
    """In-memory SQLite repository."""
    return BookRepository("sqlite:///:memory:")


# =============================================================================
# Orchestrator Fixtures
# =============================================================================

@pytest.fixture
def orchestrator(fake_gateway, repository, settings) -> SearchOrchestrator:
    return SearchOrchestrator(
        gateway=fake_gateway,
        repository=repository,
        scorer=RelevanceScorer(),
        normalizer=StringNormalizer.api_optimized(),
        settings=settings,
    )


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def guri_and_gura() -> Book:
    return Book(
        title="ぐりとぐら",
        author="なかがわりえこ, おおむらゆりこ",
        isbn13="9784834000825",
        publisher="福音館書店",
        published_date="1967-01-20",
    )


@pytest.fixture
def swimmy() -> Book:
    return Book(
        title="スイミー",
        author="レオ・レオニ",
        isbn13="9784769020197",
        publisher="好学社",
    )


@pytest.fixture
def sample_books(guri_and_gura, swimmy) -> list[Book]:
    """Catalog candidates of mixed relevance for ぐりとぐら."""
    return [
        Book(title="ぐりとぐらのえんそく", author="なかがわりえこ"),
        guri_and_gura,
        Book(title="ぐりとぐらとくるりくら", author="なかがわりえこ"),
        swimmy,
    ]
