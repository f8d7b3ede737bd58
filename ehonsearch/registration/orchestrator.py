"""
Search Orchestrator for ehonsearch

Drives one interactive registration session:
- Query entry and catalog search
- Selection of a scored result, or manual entry of a draft
- Registration through the repository

The orchestrator is an explicit state machine. Every command returns the
new immutable SessionState; the latest snapshot is also kept on
``orchestrator.state``.

    IDLE -> SEARCHING -> RESULTS_AVAILABLE -> REGISTERING -> REGISTERED
              |                 |                 |
              v                 v                 v
            FAILED         MANUAL_ENTRY        FAILED
"""

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from loguru import logger

from ehonsearch.config import Settings, get_settings
from ehonsearch.domain.models import (
    Book,
    BookSearchQuery,
    DEFAULT_TARGET_AGE,
    ScoredBook,
    SearchAnalysis,
    UNKNOWN_AUTHOR,
)
from ehonsearch.exceptions import (
    GatewayError,
    RegistrationError,
    RepositoryError,
)
from ehonsearch.identification.gateway import BookSearchGateway
from ehonsearch.identification.scorer import RelevanceScorer, analyze_results
from ehonsearch.storage.repository import Repository
from ehonsearch.text.normalizer import StringNormalizer


class SessionPhase(str, Enum):
    """Phase of a registration session."""

    IDLE = "idle"
    SEARCHING = "searching"
    RESULTS_AVAILABLE = "results_available"
    MANUAL_ENTRY = "manual_entry"
    REGISTERING = "registering"
    REGISTERED = "registered"
    FAILED = "failed"


# Phases a new search may start from
SEARCHABLE_PHASES = frozenset({
    SessionPhase.IDLE,
    SessionPhase.RESULTS_AVAILABLE,
    SessionPhase.FAILED,
    SessionPhase.REGISTERED,
})

GENERIC_SEARCH_ERROR = "検索中にエラーが発生しました"
GENERIC_REGISTRATION_ERROR = "絵本の登録中にエラーが発生しました"


def search_error_message(error: Exception) -> str:
    """User-facing message for a failed search."""
    if isinstance(error, GatewayError):
        return error.message
    return GENERIC_SEARCH_ERROR


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of a registration session."""

    phase: SessionPhase = SessionPhase.IDLE

    search_title: str = ""
    search_author: str = ""
    results: tuple[ScoredBook, ...] = ()

    # At most one of these is set
    selected: Optional[ScoredBook] = None
    manual_draft: Optional[Book] = None

    is_searching: bool = False
    is_registering: bool = False

    search_error: Optional[str] = None
    registration_error: Optional[str] = None
    registered_book: Optional[Book] = None

    @property
    def can_search(self) -> bool:
        has_query = bool(self.search_title.strip() or self.search_author.strip())
        return has_query and not self.is_searching

    @property
    def can_register(self) -> bool:
        if self.is_registering or self.is_searching:
            return False
        return (self.selected is None) != (self.manual_draft is None)

    @property
    def registration_failed(self) -> bool:
        return self.phase == SessionPhase.FAILED and self.registration_error is not None

    @property
    def is_manual_entry(self) -> bool:
        return self.phase == SessionPhase.MANUAL_ENTRY

    @property
    def book_to_register(self) -> Optional[Book]:
        if self.selected is not None:
            return self.selected.book
        return self.manual_draft

    @property
    def query(self) -> BookSearchQuery:
        """The operator's query as typed."""
        return BookSearchQuery(
            title=self.search_title,
            author=self.search_author if self.search_author.strip() else None,
        )


class SearchOrchestrator:
    """
    State machine for search, select and register.

    Collaborators are injected; nothing here is a process-wide singleton.

    Usage:
        orchestrator = SearchOrchestrator(gateway, repository)
        orchestrator.set_query("ぐりとぐら", "なかがわりえこ")
        state = await orchestrator.start_search()
        orchestrator.select_result(state.results[0])
        state = orchestrator.register()
    """

    def __init__(
        self,
        gateway: BookSearchGateway,
        repository: Repository,
        scorer: Optional[RelevanceScorer] = None,
        normalizer: Optional[StringNormalizer] = None,
        settings: Optional[Settings] = None,
    ):
        self.gateway = gateway
        self.repository = repository
        self.scorer = scorer or RelevanceScorer()
        self.normalizer = normalizer or StringNormalizer.api_optimized()
        self.settings = settings or get_settings()

        self.state = SessionState()

    def _transition(self, state: SessionState) -> SessionState:
        if state.phase != self.state.phase:
            logger.debug(f"Session phase: {self.state.phase.value} -> {state.phase.value}")
        self.state = state
        return state

    def _refuse(self, command: str) -> SessionState:
        logger.warning(f"{command} refused in phase {self.state.phase.value}")
        return self.state

    # ------------------------------------------------------------------
    # Query and search

    def set_query(self, title: str, author: str = "") -> SessionState:
        """Edit the query text."""
        if self.state.is_searching or self.state.is_registering:
            return self._refuse("set_query")

        return self._transition(replace(
            self.state,
            search_title=title or "",
            search_author=author or "",
        ))

    async def start_search(self) -> SessionState:
        """
        Search the catalog with the current query.

        The gateway receives normalized text; scoring uses the query exactly
        as typed. Refused searches leave the state untouched.

        Returns:
            State after the search completes

        Raises:
            asyncio.CancelledError: if the awaiting task is cancelled, after
                returning the session to IDLE
        """
        state = self.state
        if not state.can_search or state.phase not in SEARCHABLE_PHASES:
            return self._refuse("start_search")

        self._transition(replace(
            state,
            phase=SessionPhase.SEARCHING,
            is_searching=True,
            results=(),
            selected=None,
            search_error=None,
            registration_error=None,
            registered_book=None,
        ))

        title = self.normalizer.normalize_title(state.search_title) if state.search_title.strip() else ""
        author = self.normalizer.normalize_author(state.search_author) if state.search_author.strip() else None

        logger.info(f"Searching: title={title!r} author={author!r}")

        try:
            candidates = await self.gateway.search_books(
                title,
                author,
                max_results=self.settings.max_results,
            )
        except asyncio.CancelledError:
            logger.warning("Search cancelled")
            self._transition(replace(
                self.state,
                phase=SessionPhase.IDLE,
                is_searching=False,
            ))
            raise
        except GatewayError as e:
            logger.warning(f"Search failed: {e!r}")
            return self._transition(replace(
                self.state,
                phase=SessionPhase.FAILED,
                is_searching=False,
                search_error=search_error_message(e),
            ))
        except Exception as e:
            logger.exception(f"Unexpected search failure: {e}")
            return self._transition(replace(
                self.state,
                phase=SessionPhase.FAILED,
                is_searching=False,
                search_error=search_error_message(e),
            ))

        results = tuple(self.scorer.score_search_results(state.query, candidates))
        logger.info(f"Search returned {len(results)} candidates")

        return self._transition(replace(
            self.state,
            phase=SessionPhase.RESULTS_AVAILABLE,
            is_searching=False,
            results=results,
        ))

    def clear_results(self) -> SessionState:
        """Drop results, selection and any search error."""
        if self.state.is_searching or self.state.is_registering:
            return self._refuse("clear_results")

        phase = self.state.phase
        if phase in (SessionPhase.RESULTS_AVAILABLE, SessionPhase.FAILED):
            phase = SessionPhase.IDLE

        return self._transition(replace(
            self.state,
            phase=phase,
            results=(),
            selected=None,
            search_error=None,
        ))

    # ------------------------------------------------------------------
    # Selection and manual entry

    def select_result(self, scored: ScoredBook) -> SessionState:
        """Select a result. After a failed registration this picks another candidate to retry with."""
        state = self.state
        if state.phase != SessionPhase.RESULTS_AVAILABLE and not (state.registration_failed and state.results):
            return self._refuse("select_result")

        return self._transition(replace(
            state,
            phase=SessionPhase.RESULTS_AVAILABLE,
            registration_error=None,
            selected=scored,
            manual_draft=None,
        ))

    def switch_to_manual_entry(self) -> SessionState:
        """
        Enter manual entry, seeding a draft from the query on first entry.

        An existing draft is kept so edits survive toggling.
        """
        if self.state.phase in (SessionPhase.SEARCHING, SessionPhase.REGISTERING):
            return self._refuse("switch_to_manual_entry")

        draft = self.state.manual_draft
        if draft is None:
            draft = Book(
                title=self.state.search_title,
                author=self.state.search_author if self.state.search_author.strip() else UNKNOWN_AUTHOR,
                target_age=DEFAULT_TARGET_AGE,
            )

        return self._transition(replace(
            self.state,
            phase=SessionPhase.MANUAL_ENTRY,
            selected=None,
            manual_draft=draft,
        ))

    def switch_to_search_results(self) -> SessionState:
        if self.state.phase != SessionPhase.MANUAL_ENTRY:
            return self._refuse("switch_to_search_results")

        return self._transition(replace(
            self.state,
            phase=SessionPhase.RESULTS_AVAILABLE,
            manual_draft=None,
        ))

    def update_manual_book(self, book: Book) -> SessionState:
        """Replace the draft, also allowed to correct it after a failed registration."""
        state = self.state
        if state.phase != SessionPhase.MANUAL_ENTRY and not (state.registration_failed and state.manual_draft is not None):
            return self._refuse("update_manual_book")

        return self._transition(replace(
            state,
            phase=SessionPhase.MANUAL_ENTRY,
            manual_draft=book,
            registration_error=None,
        ))

    # ------------------------------------------------------------------
    # Registration

    def register(self) -> SessionState:
        """
        Persist the selected result or the manual draft.

        Returns:
            REGISTERED state on success, FAILED with registration_error
            (all session data kept) when the save fails for any reason

        Raises:
            RegistrationError: if there is nothing to register
        """
        state = self.state
        if not state.can_register:
            logger.warning(f"register refused in phase {state.phase.value}")
            raise RegistrationError()

        book = state.book_to_register
        self._transition(replace(
            state,
            phase=SessionPhase.REGISTERING,
            is_registering=True,
            registration_error=None,
        ))

        try:
            saved = self.repository.save(book)
        except RepositoryError as e:
            logger.warning(f"Registration failed: {e.message}")
            return self._transition(replace(
                state,
                phase=SessionPhase.FAILED,
                is_registering=False,
                registration_error=f"{GENERIC_REGISTRATION_ERROR}: {e.message}",
            ))
        except Exception as e:
            logger.exception(f"Unexpected registration failure: {e}")
            return self._transition(replace(
                state,
                phase=SessionPhase.FAILED,
                is_registering=False,
                registration_error=GENERIC_REGISTRATION_ERROR,
            ))

        logger.info(f"Registered: {saved.title} ({saved.id})")
        return self._transition(SessionState(
            phase=SessionPhase.REGISTERED,
            registered_book=saved,
        ))

    def reset(self) -> SessionState:
        """Back to IDLE with everything cleared."""
        return self._transition(SessionState())

    def search_analysis(self) -> Optional[SearchAnalysis]:
        return analyze_results(self.state.query, self.state.results)
