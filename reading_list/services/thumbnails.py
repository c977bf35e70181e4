"""Fill in missing cover thumbnails for the reading list.

Books are processed one at a time with a fixed pause between lookups so the
run stays inside Google Books' anonymous rate limits. Do not parallelise.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import click

from reading_list import config
from reading_list.services.book_lookup import SearchFn, find_thumbnail, search_google_books
from reading_list.utils.books import Book

logger = logging.getLogger("reading_list")


@dataclass
class ResolveSummary:
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.updated + self.skipped + self.failed


def _available_strategies(book: Book) -> List[str]:
    methods = []
    if book.isbn13.strip():
        methods.append("ISBN")
    if book.title and book.author:
        methods.append("Title+Author")
    if book.title:
        methods.append("Title")
    return methods


def resolve_thumbnails(
    books: List[Book],
    search: SearchFn = search_google_books,
    delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    echo: Callable[[str], None] = click.echo,
) -> ResolveSummary:
    """Look up a thumbnail for every book that lacks one.

    Updates the books in place and returns the updated/skipped/failed counts.
    Books that already have a thumbnail are skipped without any request.
    """
    if delay is None:
        delay = config.THUMBNAIL_REQUEST_DELAY

    summary = ResolveSummary()
    total = len(books)

    for index, book in enumerate(books):
        prefix = f"[{index + 1}/{total}]"

        if book.has_thumbnail():
            echo(f"{prefix} ✓ {book.title} - Already has thumbnail")
            summary.skipped += 1
            continue

        echo(f"{prefix} 🔍 {book.title} - Fetching thumbnail...")
        thumbnail = find_thumbnail(book, search=search)

        if thumbnail:
            book.thumbnail = thumbnail
            summary.updated += 1
            echo(f"  ✓ Found thumbnail: {thumbnail[:60]}...")
        else:
            summary.failed += 1
            tried = ", ".join(_available_strategies(book)) or "nothing to search by"
            echo(f"  ✗ No thumbnail found (tried: {tried})")
            logger.debug(f"No thumbnail for {book.title!r} (isbn13={book.isbn13!r})")

        if index < total - 1:
            sleep(delay)

    return summary
