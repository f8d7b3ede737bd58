"""
Batch Matching Pipeline for ehonsearch

Registers many books from pasted text, one "<management number> <title>"
per line:
- Parse lines into entries
- Search each entry in turn, auto-accepting the best candidate
- Reconcile unmatched entries against books already registered
- Remediate the rest by hand through a queue
- Commit matched entries to the repository

Entries are processed strictly in input order, one search at a time.
"""

import asyncio
import uuid
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from loguru import logger

from ehonsearch.config import Settings, get_settings
from ehonsearch.domain.models import (
    Book,
    DEFAULT_TARGET_AGE,
    ParsedBookEntry,
    UNKNOWN_AUTHOR,
)
from ehonsearch.identification.scorer import select_auto_accept
from ehonsearch.registration.orchestrator import SearchOrchestrator, SessionPhase
from ehonsearch.storage.repository import Repository
from ehonsearch.text.kana import kana_group_for


def parse_batch_input(text: str) -> list[ParsedBookEntry]:
    """
    Parse pasted batch text.

    The first whitespace-delimited token is the management number and the
    remaining tokens, joined by single spaces, are the title. Lines with
    fewer than two tokens are dropped.

    Args:
        text: Multi-line input

    Returns:
        Entries in input order
    """
    entries = []

    for line_number, raw in enumerate((text or "").splitlines(), start=1):
        # str.split() also splits on U+3000
        tokens = raw.split()
        if not tokens:
            continue

        if len(tokens) < 2:
            logger.debug(f"Dropping line {line_number}: no title after {tokens[0]!r}")
            continue

        entries.append(ParsedBookEntry(
            management_number=tokens[0],
            input_title=" ".join(tokens[1:]),
        ))

    return entries


@dataclass
class BatchReport:
    """Outcome of a batch run before remediation."""

    entries: list[ParsedBookEntry]
    timed_out: list[ParsedBookEntry] = field(default_factory=list)

    @property
    def matched(self) -> list[ParsedBookEntry]:
        return [e for e in self.entries if e.is_matched]

    @property
    def unmatched(self) -> list[ParsedBookEntry]:
        return [e for e in self.entries if not e.is_matched]

    def summary(self) -> dict:
        return {
            "total": len(self.entries),
            "matched": len(self.matched),
            "unmatched": len(self.unmatched),
            "timed_out": len(self.timed_out),
        }


class RemediationQueue:
    """
    Manual resolution of entries the matcher could not fill.

    ``pending`` is derived from the entries on every access, so a save or
    skip is reflected immediately and the head never goes stale.

    Usage:
        queue = RemediationQueue(entries)
        while not queue.is_empty:
            draft = queue.draft_for_head()
            queue.save(edited_draft)  # or queue.skip()
    """

    def __init__(self, entries: list[ParsedBookEntry]):
        self.entries = entries
        self._skipped: set[str] = set()

    @property
    def pending(self) -> list[ParsedBookEntry]:
        return [
            e for e in self.entries
            if e.found_book is None and e.id not in self._skipped
        ]

    @property
    def head(self) -> Optional[ParsedBookEntry]:
        pending = self.pending
        return pending[0] if pending else None

    @property
    def is_empty(self) -> bool:
        return self.head is None

    def draft_for_head(self) -> Optional[Book]:
        """Manual-entry draft pre-filled from the head entry."""
        entry = self.head
        if entry is None:
            return None

        return Book(
            title=entry.input_title,
            author=UNKNOWN_AUTHOR,
            target_age=DEFAULT_TARGET_AGE,
            management_number=entry.management_number,
            kana_group=kana_group_for(entry.input_title),
        )

    def save(self, book: Book) -> ParsedBookEntry:
        """Resolve the head entry with a manually entered book."""
        entry = self.head
        if entry is None:
            raise IndexError("remediation queue is empty")

        entry.found_book = book
        logger.info(f"Remediated {entry.management_number}: {book.title}")
        return entry

    def skip(self) -> ParsedBookEntry:
        """Leave the head entry unmatched for this pass."""
        entry = self.head
        if entry is None:
            raise IndexError("remediation queue is empty")

        self._skipped.add(entry.id)
        logger.info(f"Skipped {entry.management_number}")
        return entry


class BatchMatchingPipeline:
    """
    Sequential matcher driving a SearchOrchestrator per entry.

    Each entry's search is bounded by ``settings.batch_entry_timeout``;
    a search that runs over is cancelled and the entry left unmatched.
    """

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        repository: Repository,
        settings: Optional[Settings] = None,
    ):
        self.orchestrator = orchestrator
        self.repository = repository
        self.settings = settings or get_settings()

    async def process(self, entries: Sequence[ParsedBookEntry]) -> list[ParsedBookEntry]:
        """
        Search every entry in order and auto-accept the best candidate.

        Returns:
            Entries that timed out
        """
        timed_out = []

        for index, entry in enumerate(entries, start=1):
            logger.info(f"[{index}/{len(entries)}] {entry.management_number} {entry.input_title}")

            self.orchestrator.reset()
            self.orchestrator.set_query(entry.input_title, "")

            try:
                state = await asyncio.wait_for(
                    self.orchestrator.start_search(),
                    timeout=self.settings.batch_entry_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"Search for {entry.management_number} timed out after "
                    f"{self.settings.batch_entry_timeout}s"
                )
                timed_out.append(entry)
                continue

            if state.phase != SessionPhase.RESULTS_AVAILABLE:
                logger.info(f"No match for {entry.management_number}: {state.search_error}")
                continue

            best = select_auto_accept(state.results, self.settings.auto_accept_threshold)
            if best is None:
                logger.info(f"No candidate above threshold for {entry.management_number}")
                continue

            entry.found_book = best.book
            logger.info(f"Matched {entry.management_number} -> {best.book.title} ({best.score:.2f})")

        self.orchestrator.reset()
        return timed_out

    def reconcile(self, entries: Sequence[ParsedBookEntry]) -> int:
        """
        Fill unmatched entries from books already registered under the
        same management number.

        Returns:
            Number of entries filled
        """
        filled = 0
        for entry in entries:
            if entry.found_book is not None:
                continue

            existing = self.repository.find_by_management_number(entry.management_number)
            if existing is not None:
                entry.found_book = existing
                filled += 1
                logger.debug(f"Reconciled {entry.management_number} with stored book {existing.id}")

        return filled

    async def run(self, text: str) -> BatchReport:
        """Parse, process and reconcile a block of batch input."""
        entries = parse_batch_input(text)
        logger.info(f"Batch of {len(entries)} entries")

        timed_out = await self.process(entries)
        self.reconcile(entries)

        report = BatchReport(entries=entries, timed_out=timed_out)
        logger.info(f"Batch summary: {report.summary()}")
        return report

    def commit(self, entries: Sequence[ParsedBookEntry]) -> list[Book]:
        """
        Persist every matched entry.

        Each saved book carries the entry's management number and a kana
        group computed from its final title. The management number is the
        row's identity: a book already stored under it is updated in place,
        anything else is inserted under a fresh id, so entries that matched
        the same catalog record never overwrite each other.

        Raises:
            RepositoryError: on the first failed save
        """
        saved = []
        for entry in entries:
            if entry.found_book is None:
                continue

            stored = self.repository.find_by_management_number(entry.management_number)
            book = replace(
                entry.found_book,
                id=stored.id if stored is not None else str(uuid.uuid4()),
                management_number=entry.management_number,
                kana_group=kana_group_for(entry.found_book.title),
            )
            saved.append(self.repository.save(book))

        logger.info(f"Committed {len(saved)} books")
        return saved
