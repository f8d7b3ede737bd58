"""
Domain models for the picture-book search pipeline.

Plain dataclasses shared by the normalizer, scorer, orchestrator and
batch pipeline. Only ``title`` and ``author`` of a Book are ever inspected
by the matching code; every other field is payload carried through.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# Placeholder author used when the operator has not typed one
UNKNOWN_AUTHOR = "不明"

# Default target age for manually entered picture books
DEFAULT_TARGET_AGE = 3


class KanaGroup(str, Enum):
    """Gojūon row used to section the book list."""

    A = "あ"
    KA = "か"
    SA = "さ"
    TA = "た"
    NA = "な"
    HA = "は"
    MA = "ま"
    YA = "や"
    RA = "ら"
    WA = "わ"
    OTHER = "他"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def sort_order(self) -> int:
        return list(KanaGroup).index(self)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Book:
    """
    Picture-book record.

    Search results, manual drafts and persisted books all share this shape.
    """

    title: str
    author: str

    isbn13: Optional[str] = None
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    description: Optional[str] = None

    # Cover images
    small_thumbnail: Optional[str] = None
    thumbnail: Optional[str] = None

    target_age: Optional[int] = None
    page_count: Optional[int] = None
    categories: list[str] = field(default_factory=list)

    # Lending-library fields
    management_number: Optional[str] = None
    kana_group: Optional[KanaGroup] = None

    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn13": self.isbn13,
            "publisher": self.publisher,
            "published_date": self.published_date,
            "description": self.description,
            "small_thumbnail": self.small_thumbnail,
            "thumbnail": self.thumbnail,
            "target_age": self.target_age,
            "page_count": self.page_count,
            "categories": list(self.categories),
            "management_number": self.management_number,
            "kana_group": self.kana_group.value if self.kana_group else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Book":
        """Create from dictionary."""
        kana_group = data.get("kana_group")
        return cls(
            id=data.get("id") or _new_id(),
            title=data.get("title", ""),
            author=data.get("author", ""),
            isbn13=data.get("isbn13"),
            publisher=data.get("publisher"),
            published_date=data.get("published_date"),
            description=data.get("description"),
            small_thumbnail=data.get("small_thumbnail"),
            thumbnail=data.get("thumbnail"),
            target_age=data.get("target_age"),
            page_count=data.get("page_count"),
            categories=list(data.get("categories") or []),
            management_number=data.get("management_number"),
            kana_group=KanaGroup(kana_group) if kana_group else None,
        )


@dataclass(frozen=True)
class BookSearchQuery:
    """Operator-typed query, kept un-normalized for scoring."""

    title: str
    author: Optional[str] = None


@dataclass(frozen=True)
class ScoredBook:
    """Catalog candidate paired with a relevance score in [0, 1]."""

    book: Book
    score: float


@dataclass
class ParsedBookEntry:
    """One line of batch input and, once resolved, the matched book."""

    management_number: str
    input_title: str
    found_book: Optional[Book] = None
    id: str = field(default_factory=_new_id)

    @property
    def is_matched(self) -> bool:
        return self.found_book is not None


class SearchQuality(str, Enum):
    """Overall quality of a result set."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @property
    def display_name(self) -> str:
        return {
            SearchQuality.EXCELLENT: "非常に良い",
            SearchQuality.GOOD: "良い",
            SearchQuality.FAIR: "普通",
            SearchQuality.POOR: "悪い",
        }[self]


@dataclass(frozen=True)
class SearchAnalysis:
    """
    Read-only summary over a scored result set.

    Counts are partitioned by score band:
    exact (>= 0.9), high (0.8-0.9), medium (0.5-0.8), low (< 0.5).
    """

    search_query: BookSearchQuery
    total_results: int
    exact_count: int
    high_count: int
    medium_count: int
    low_count: int
    average_score: float
    top_result: Optional[ScoredBook] = None

    @property
    def has_exact_match(self) -> bool:
        return self.exact_count > 0

    @property
    def quality(self) -> SearchQuality:
        if self.has_exact_match:
            return SearchQuality.EXCELLENT
        elif self.high_count > 0:
            return SearchQuality.GOOD
        elif self.medium_count > 0:
            return SearchQuality.FAIR
        else:
            return SearchQuality.POOR
