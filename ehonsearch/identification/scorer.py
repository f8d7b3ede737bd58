"""
Relevance Scorer for ehonsearch

Scores catalog candidates against the operator's original query:
- Tiered title matching (exact, prefix, contains, fuzzy)
- Tiered author matching with role descriptors removed
- Weighted combination over the parts the query actually has

Score bands are a fixed contract shared with the batch pipeline:
    >= 0.9        exact
    [0.8, 0.9)    high
    [0.5, 0.8)    medium
    < 0.5         low
"""

from difflib import SequenceMatcher
from typing import Optional, Sequence

from loguru import logger

from ehonsearch.domain.models import Book, BookSearchQuery, ScoredBook, SearchAnalysis
from ehonsearch.text.normalizer import StringNormalizer


EXACT_THRESHOLD = 0.9
HIGH_THRESHOLD = 0.8
MEDIUM_THRESHOLD = 0.5
AUTO_ACCEPT_THRESHOLD = 0.5

TITLE_WEIGHT = 0.7
AUTHOR_WEIGHT = 0.3

# Marks that vary freely between catalog entries and operator input
_IGNORED_MARKS = str.maketrans({
    ch: None for ch in " -ー~:/・･·－―～〜：／"
})


def _similarity(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    return SequenceMatcher(None, a, b).ratio()


class RelevanceScorer:
    """
    Scores and ranks search candidates.

    Deterministic: identical inputs always produce identical scores and
    ordering. Ties keep the catalog's order.
    """

    def __init__(self, normalizer: Optional[StringNormalizer] = None):
        self.normalizer = normalizer or StringNormalizer.standard()

    def score_search_results(
        self,
        query: BookSearchQuery,
        candidates: Sequence[Book],
    ) -> list[ScoredBook]:
        """
        Score candidates and sort them by descending relevance.

        Args:
            query: Un-normalized operator query
            candidates: Raw catalog candidates

        Returns:
            ScoredBooks, best first
        """
        scored = [
            ScoredBook(book=book, score=self.score(query, book))
            for book in candidates
        ]
        # sorted() is stable, so equal scores keep catalog order
        scored = sorted(scored, key=lambda s: s.score, reverse=True)

        for item in scored[:5]:
            logger.debug(f"  {item.score:.3f} {item.book.title} / {item.book.author}")

        return scored

    def score(self, query: BookSearchQuery, book: Book) -> float:
        """Combined relevance of one candidate, in [0, 1]."""
        total = 0.0
        weight = 0.0

        if query.title and query.title.strip():
            total += TITLE_WEIGHT * self.title_score(query.title, book.title)
            weight += TITLE_WEIGHT

        if query.author and query.author.strip():
            total += AUTHOR_WEIGHT * self.author_score(query.author, book.author)
            weight += AUTHOR_WEIGHT

        if weight == 0.0:
            return 0.0

        return min(1.0, max(0.0, total / weight))

    def title_score(self, query_title: str, candidate_title: str) -> float:
        query = self._comparable(self.normalizer.normalize(query_title))
        candidate = self._comparable(self.normalizer.normalize(candidate_title or ""))

        if not query or not candidate:
            return 0.0
        if query == candidate:
            return 1.0
        if candidate.startswith(query):
            return 0.9
        if query in candidate:
            return 0.8
        if candidate in query:
            return 0.7

        ratio = _similarity(query, candidate)
        return ratio * 0.6 if ratio >= 0.5 else 0.0

    def author_score(self, query_author: str, candidate_author: str) -> float:
        query = self._comparable(self.normalizer.normalize_author(query_author))
        candidate = self._comparable(self.normalizer.normalize_author(candidate_author or ""))

        if not query or not candidate:
            return 0.0
        if query == candidate:
            return 1.0
        if query in candidate or candidate in query:
            return 0.8

        ratio = _similarity(query, candidate)
        return ratio * 0.7 if ratio >= 0.6 else 0.0

    @staticmethod
    def _comparable(text: str) -> str:
        return text.lower().translate(_IGNORED_MARKS)


def select_auto_accept(
    scored: Sequence[ScoredBook],
    threshold: float = AUTO_ACCEPT_THRESHOLD,
) -> Optional[ScoredBook]:
    """
    Auto-accept rule: the highest-scoring candidate at or above threshold.

    Does not assume the input is sorted. Ties resolve to the earliest.
    """
    best: Optional[ScoredBook] = None
    for item in scored:
        if item.score >= threshold and (best is None or item.score > best.score):
            best = item
    return best


def analyze_results(
    query: BookSearchQuery,
    scored: Sequence[ScoredBook],
) -> Optional[SearchAnalysis]:
    """
    Summarize a scored result set by band.

    Returns:
        SearchAnalysis, or None for an empty result set
    """
    if not scored:
        return None

    exact = sum(1 for s in scored if s.score >= EXACT_THRESHOLD)
    high = sum(1 for s in scored if HIGH_THRESHOLD <= s.score < EXACT_THRESHOLD)
    medium = sum(1 for s in scored if MEDIUM_THRESHOLD <= s.score < HIGH_THRESHOLD)
    low = sum(1 for s in scored if s.score < MEDIUM_THRESHOLD)

    return SearchAnalysis(
        search_query=query,
        total_results=len(scored),
        exact_count=exact,
        high_count=high,
        medium_count=medium,
        low_count=low,
        average_score=sum(s.score for s in scored) / len(scored),
        top_result=max(scored, key=lambda s: s.score),
    )
