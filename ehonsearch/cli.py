"""
Command-line driver for batch matching.

    python -m ehonsearch.cli batch books.txt
    python -m ehonsearch.cli batch books.txt --commit
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ehonsearch.config import Settings, get_settings
from ehonsearch.exceptions import EhonSearchException, ValidationError
from ehonsearch.identification.google_books import GoogleBooksGateway
from ehonsearch.registration.batch import BatchMatchingPipeline
from ehonsearch.registration.orchestrator import SearchOrchestrator
from ehonsearch.storage.repository import BookRepository


def configure_logging(level: str = "INFO"):
    logger.remove()
    logger.add(sys.stderr, level=level)


async def run_batch(path: Path, commit: bool, settings: Settings) -> int:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        raise ValidationError("入力ファイルが空です", detail=str(path))

    repository = BookRepository(settings.database_url, echo=settings.database_echo)
    gateway = GoogleBooksGateway.from_settings(settings)
    orchestrator = SearchOrchestrator(gateway, repository, settings=settings)
    pipeline = BatchMatchingPipeline(orchestrator, repository, settings=settings)

    try:
        report = await pipeline.run(text)
    finally:
        await gateway.close()

    for entry in report.entries:
        if entry.found_book:
            print(f"✅ {entry.management_number}\t{entry.input_title}\t-> {entry.found_book.title} / {entry.found_book.author}")
        else:
            print(f"❌ {entry.management_number}\t{entry.input_title}")

    summary = report.summary()
    print(f"\n{summary['matched']}/{summary['total']} matched, {summary['timed_out']} timed out")

    if commit:
        saved = pipeline.commit(report.entries)
        print(f"{len(saved)}件の絵本を追加しました")

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="ehonsearch", description="Picture-book search and match")
    subparsers = parser.add_subparsers(dest="command", required=True)

    batch = subparsers.add_parser("batch", help="Match '<management number> <title>' lines against Google Books")
    batch.add_argument("file", type=Path, help="UTF-8 text file, one book per line")
    batch.add_argument("--commit", action="store_true", help="Save matched books to the database")

    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        return asyncio.run(run_batch(args.file, args.commit, settings))
    except EhonSearchException as e:
        logger.error(f"{e.code}: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
