import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from reading_list.errors import BookStoreError
from reading_list.utils.books import Book

logger = logging.getLogger("reading_list.store")

PathLike = Union[str, Path]


@dataclass
class BookFile:
    """The books data file as loaded.

    ``payload`` is the decoded JSON exactly as read. ``entries`` are the
    object records inside it (the same dicts, not copies) and ``books`` are
    the matching Book views. Only thumbnails flow back into the entries, so
    saving never rewrites other fields, drops stray entries or changes the
    top-level shape.
    """

    payload: Any
    entries: List[Dict[str, Any]] = field(default_factory=list)
    books: List[Book] = field(default_factory=list)
    loaded_thumbnails: List[str] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self.loaded_thumbnails = [b.thumbnail for b in self.books]

    def apply_thumbnails(self) -> int:
        """Copy changed thumbnails from the books into the raw entries."""
        changed = 0
        for entry, book, loaded in zip(
            self.entries, self.books, self.loaded_thumbnails
        ):
            if book.thumbnail != loaded:
                entry["thumbnail"] = book.thumbnail
                changed += 1
        return changed


def dump_books(books: Sequence[Book]) -> str:
    """Serialise books to the JSON document the website imports."""
    return _dumps([b.to_dict() for b in books])


def _dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _extract_records(payload: Any) -> List[Any]:
    # The site accepts either a bare array or {"books": [...]}
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("books"), list):
        return payload["books"]
    raise BookStoreError("Expected a JSON array of books")


def load_book_file(path: PathLike) -> BookFile:
    """Load the books data file.

    Raises:
        BookStoreError: If the file is missing, unreadable or not valid JSON.
    """
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        raise BookStoreError(f"Could not read {path}: {e}") from e

    records = _extract_records(payload)
    entries = [r for r in records if isinstance(r, dict)]
    if len(entries) != len(records):
        logger.warning(
            f"Leaving {len(records) - len(entries)} non-object entries untouched"
        )
    logger.debug(f"Loaded {len(entries)} books from {path}")
    return BookFile(
        payload=payload,
        entries=entries,
        books=[Book.from_dict(e) for e in entries],
    )


def _write_atomic(content: str, path: PathLike) -> None:
    # Written next to the target and moved into place, so readers never see
    # a half-written file
    target = Path(path)
    tmp_name = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, target)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise BookStoreError(f"Could not write {path}: {e}") from e


def save_books(books: Sequence[Book], path: PathLike) -> None:
    """Write a freshly converted collection to ``path``.

    Raises:
        BookStoreError: If the file cannot be written.
    """
    _write_atomic(dump_books(books), path)
    logger.debug(f"Saved {len(books)} books to {path}")


def save_book_file(book_file: BookFile, path: PathLike) -> None:
    """Overwrite the data file, changing nothing but resolved thumbnails.

    Raises:
        BookStoreError: If the file cannot be written.
    """
    changed = book_file.apply_thumbnails()
    _write_atomic(_dumps(book_file.payload), path)
    logger.debug(f"Saved {path} ({changed} thumbnail(s) changed)")


def backup_file(source: PathLike, path: PathLike) -> bool:
    """Copy the data file byte for byte. Failures are only logged."""
    try:
        shutil.copyfile(source, path)
    except OSError as e:
        logger.warning(f"Could not create backup {path}: {e}")
        return False
    return True
