"""
Unit tests for the batch matching pipeline.
"""

import asyncio
from dataclasses import replace
from unittest.mock import Mock

import pytest

from ehonsearch.domain.models import Book, KanaGroup, ParsedBookEntry
from ehonsearch.exceptions import RepositoryError
from ehonsearch.registration.batch import (
    BatchMatchingPipeline,
    RemediationQueue,
    parse_batch_input,
)
from ehonsearch.registration.orchestrator import SessionPhase

pytestmark = pytest.mark.asyncio


@pytest.fixture
def pipeline(orchestrator, repository, settings) -> BatchMatchingPipeline:
    return BatchMatchingPipeline(orchestrator, repository, settings=settings)


class TestParseBatchInput:
    """Tests for parse_batch_input."""

    async def test_single_line(self):
        entries = parse_batch_input("あ31 あいうえお")

        assert len(entries) == 1
        assert entries[0].management_number == "あ31"
        assert entries[0].input_title == "あいうえお"
        assert entries[0].found_book is None

    async def test_title_tokens_joined(self):
        entries = parse_batch_input("か2　ぐり　と   ぐら")

        assert entries[0].management_number == "か2"
        assert entries[0].input_title == "ぐり と ぐら"

    async def test_blank_and_single_token_lines_dropped(self):
        text = "\nあ1 ぐりとぐら\n\n   \nあ2\nさ3 スイミー  \n"

        entries = parse_batch_input(text)

        assert [(e.management_number, e.input_title) for e in entries] == [
            ("あ1", "ぐりとぐら"),
            ("さ3", "スイミー"),
        ]

    async def test_empty(self):
        assert parse_batch_input("") == []

    async def test_entries_have_distinct_ids(self):
        entries = parse_batch_input("あ1 いち\nあ2 いち")

        assert entries[0].id != entries[1].id


class TestProcess:
    """Tests for sequential auto matching."""

    async def test_auto_accepts_best_candidate(self, pipeline, fake_gateway, sample_books):
        fake_gateway.results["ぐりとぐら"] = sample_books
        entries = parse_batch_input("あ1 ぐりとぐら\nか2 しらないほん")

        timed_out = await pipeline.process(entries)

        assert timed_out == []
        assert entries[0].found_book.title == "ぐりとぐら"
        assert entries[1].found_book is None

    async def test_searches_in_input_order(self, pipeline, fake_gateway):
        entries = parse_batch_input("あ1 いち\nあ2 に\nあ3 さん")

        await pipeline.process(entries)

        assert [call[0] for call in fake_gateway.calls] == ["いち", "に", "さん"]
        assert all(call[1] is None for call in fake_gateway.calls)

    async def test_below_threshold_stays_unmatched(self, pipeline, fake_gateway):
        fake_gateway.results["ぞうくんのさんぽ"] = [Book(title="まったくちがうほん", author="だれか")]
        entries = parse_batch_input("さ1 ぞうくんのさんぽ")

        await pipeline.process(entries)

        assert entries[0].found_book is None

    async def test_timeout_leaves_entry_unmatched(self, orchestrator, repository, settings, fake_gateway, sample_books):
        pipeline = BatchMatchingPipeline(
            orchestrator,
            repository,
            settings=replace(settings, batch_entry_timeout=0.05),
        )
        fake_gateway.blocked["おそいほん"] = asyncio.Event()
        fake_gateway.results["ぐりとぐら"] = sample_books
        entries = parse_batch_input("あ1 おそいほん\nか2 ぐりとぐら")

        timed_out = await pipeline.process(entries)

        assert timed_out == [entries[0]]
        assert entries[0].found_book is None
        assert entries[1].found_book.title == "ぐりとぐら"
        assert orchestrator.state.phase == SessionPhase.IDLE

    async def test_orchestrator_reset_after_run(self, pipeline, orchestrator, fake_gateway, sample_books):
        fake_gateway.results["ぐりとぐら"] = sample_books

        await pipeline.process(parse_batch_input("あ1 ぐりとぐら"))

        assert orchestrator.state.phase == SessionPhase.IDLE
        assert orchestrator.state.results == ()


class TestReconcile:
    """Tests for reconciliation against stored books."""

    async def test_fills_from_repository(self, pipeline, repository, guri_and_gura):
        repository.save(replace(guri_and_gura, management_number="あ1"))
        entries = parse_batch_input("あ1 ぐりとぐら\nか2 しらないほん")

        filled = pipeline.reconcile(entries)

        assert filled == 1
        assert entries[0].found_book.id == guri_and_gura.id
        assert entries[1].found_book is None

    async def test_matched_entries_untouched(self, pipeline, repository, guri_and_gura, swimmy):
        repository.save(replace(guri_and_gura, management_number="あ1"))
        entries = parse_batch_input("あ1 スイミー")
        entries[0].found_book = swimmy

        assert pipeline.reconcile(entries) == 0
        assert entries[0].found_book is swimmy


class TestRemediationQueue:
    """Tests for manual remediation."""

    @pytest.fixture
    def entries(self, swimmy) -> list[ParsedBookEntry]:
        entries = parse_batch_input("あ1 あおくんときいろちゃん\nさ2 スイミー\nは3 はらぺこあおむし")
        entries[1].found_book = swimmy
        return entries

    async def test_pending_and_head(self, entries):
        queue = RemediationQueue(entries)

        assert [e.management_number for e in queue.pending] == ["あ1", "は3"]
        assert queue.head is entries[0]
        assert not queue.is_empty

    async def test_draft_for_head(self, entries):
        queue = RemediationQueue(entries)

        draft = queue.draft_for_head()

        assert draft.title == "あおくんときいろちゃん"
        assert draft.author == "不明"
        assert draft.target_age == 3
        assert draft.management_number == "あ1"
        assert draft.kana_group == KanaGroup.A

    async def test_save_advances(self, entries):
        queue = RemediationQueue(entries)
        book = replace(queue.draft_for_head(), author="レオ・レオニ")

        saved = queue.save(book)

        assert saved is entries[0]
        assert entries[0].found_book is book
        assert queue.head is entries[2]

    async def test_skip_advances_without_matching(self, entries):
        queue = RemediationQueue(entries)

        queue.skip()

        assert queue.head is entries[2]
        assert entries[0].found_book is None

    async def test_empty_when_all_resolved(self, entries):
        queue = RemediationQueue(entries)
        queue.save(queue.draft_for_head())
        queue.skip()

        assert queue.is_empty
        assert queue.head is None
        assert queue.draft_for_head() is None

        with pytest.raises(IndexError):
            queue.skip()
        with pytest.raises(IndexError):
            queue.save(Book(title="x", author="y"))

    async def test_reflects_external_changes(self, entries, swimmy):
        queue = RemediationQueue(entries)

        entries[0].found_book = swimmy

        assert queue.head is entries[2]


class TestCommit:
    """Tests for the final commit."""

    async def test_only_matched_entries_saved(self, pipeline, repository, guri_and_gura, swimmy):
        entries = parse_batch_input("か1 ぐりとぐら\nさ2 スイミー\nは3 はらぺこあおむし")
        entries[0].found_book = guri_and_gura
        entries[1].found_book = swimmy

        saved = pipeline.commit(entries)

        assert len(saved) == 2
        assert repository.count() == 2

        stored = repository.find_by_management_number("さ2")
        assert stored.title == "スイミー"
        assert stored.kana_group == KanaGroup.SA
        assert repository.find_by_management_number("は3") is None

    async def test_kana_group_from_final_title(self, pipeline, repository):
        entries = parse_batch_input("あ1 あおくん")
        entries[0].found_book = Book(title="100万回生きたねこ", author="佐野洋子", kana_group=KanaGroup.HA)

        saved = pipeline.commit(entries)

        assert saved[0].kana_group == KanaGroup.OTHER
        assert saved[0].management_number == "あ1"

    async def test_two_copies_of_same_book(self, pipeline, fake_gateway, repository, guri_and_gura):
        fake_gateway.results["ぐりとぐら"] = [guri_and_gura]
        report = await pipeline.run("か1 ぐりとぐら\nか2 ぐりとぐら")

        saved = pipeline.commit(report.entries)

        assert report.entries[0].found_book is report.entries[1].found_book
        assert len(saved) == 2
        assert saved[0].id != saved[1].id
        assert repository.count() == 2
        assert repository.find_by_management_number("か1").title == "ぐりとぐら"
        assert repository.find_by_management_number("か2").title == "ぐりとぐら"

    async def test_recommit_updates_stored_book(self, pipeline, repository, guri_and_gura):
        entries = parse_batch_input("か1 ぐりとぐら")
        entries[0].found_book = guri_and_gura
        first = pipeline.commit(entries)

        entries[0].found_book = replace(guri_and_gura, publisher="福音館")
        second = pipeline.commit(entries)

        assert repository.count() == 1
        assert second[0].id == first[0].id
        assert repository.find_by_management_number("か1").publisher == "福音館"

    async def test_repository_failure_propagates(self, orchestrator, settings, guri_and_gura):
        repository = Mock()
        repository.save.side_effect = RepositoryError("disk full")
        repository.find_by_management_number.return_value = None
        pipeline = BatchMatchingPipeline(orchestrator, repository, settings=settings)
        entries = parse_batch_input("か1 ぐりとぐら")
        entries[0].found_book = guri_and_gura

        with pytest.raises(RepositoryError):
            pipeline.commit(entries)


class TestRun:
    """Tests for the parse/process/reconcile convenience."""

    async def test_report(self, pipeline, fake_gateway, repository, sample_books, swimmy):
        fake_gateway.results["ぐりとぐら"] = sample_books
        repository.save(replace(swimmy, management_number="さ2"))

        report = await pipeline.run("か1 ぐりとぐら\nさ2 すいみー\nは3 はらぺこあおむし\nあ4")

        assert len(report.entries) == 3
        assert [e.management_number for e in report.matched] == ["か1", "さ2"]
        assert [e.management_number for e in report.unmatched] == ["は3"]
        assert report.summary() == {"total": 3, "matched": 2, "unmatched": 1, "timed_out": 0}
