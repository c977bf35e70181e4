"""Convert a spreadsheet CSV export into reading list records.

The sheet behind the reading list is edited by hand, so column names drift
("Page Count", "pages", "PageCount"...). Headers are trimmed, lowercased and
looked up in HEADER_MAP; anything unknown is kept under its normalised name.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from reading_list.utils.books import BOOK_FIELDS, INTEGER_FIELDS, Book, parse_int

logger = logging.getLogger("reading_list")

# Normalised header -> canonical field name
HEADER_MAP: Dict[str, str] = {
    "title": "title",
    "author": "author",
    "firstpublished": "firstPublished",
    "first published": "firstPublished",
    "category": "category",
    "isbn-13": "isbn13",
    "isbn13": "isbn13",
    "isbn": "isbn13",
    "description": "description",
    "pagecount": "pageCount",
    "page count": "pageCount",
    "pages": "pageCount",
    "publisher": "publisher",
    "thumbnail": "thumbnail",
    "image": "thumbnail",
    "buylink": "buyLink",
    "buy link": "buyLink",
    "link": "buyLink",
    "url": "buyLink",
}


@dataclass
class ParseIssue:
    """A structural problem found while reading the CSV."""

    row: int
    code: str
    message: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.code} - {self.message}"


@dataclass
class SheetImport:
    books: List[Book] = field(default_factory=list)
    errors: List[ParseIssue] = field(default_factory=list)


def normalize_header(header: str) -> str:
    return header.strip().lower()


def map_header(header: str) -> str:
    """Map a raw header cell to its canonical field name.

    Unknown headers pass through in their normalised form.
    """
    clean = normalize_header(header)
    return HEADER_MAP.get(clean, clean)


def _build_record(columns: List[Optional[str]], cells: List[str]) -> Dict[str, str]:
    record: Dict[str, str] = {}
    for index, name in enumerate(columns):
        if name is None:
            continue
        value = cells[index].strip() if index < len(cells) else ""
        # First non-empty value wins when two columns map to the same field
        if not record.get(name):
            record[name] = value
    return record


def _record_to_book(record: Dict[str, str]) -> Book:
    values = {}
    extra = {}
    for name, value in record.items():
        attr = BOOK_FIELDS.get(name)
        if attr is None:
            extra[name] = value
        elif name in INTEGER_FIELDS:
            values[attr] = parse_int(value)
        else:
            values[attr] = value
    return Book(extra=extra, **values)


def parse_sheet_csv(csv_content: str) -> SheetImport:
    """Parse spreadsheet CSV content into Book records.

    Rows without a title are dropped. Malformed rows never raise: they are
    reported in ``SheetImport.errors`` and whatever could be read is kept.
    """
    result = SheetImport()

    stream = io.StringIO(csv_content)
    # Spreadsheet exports sometimes start with a BOM
    if csv_content.startswith("\ufeff"):
        stream.seek(1)

    reader = csv.reader(stream, strict=True)
    columns: Optional[List[Optional[str]]] = None
    row_number = 0

    while True:
        try:
            cells = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            # The reader resumes on the next physical line after an error
            if columns is not None:
                row_number += 1
            result.errors.append(ParseIssue(row_number, "MalformedCSV", str(e)))
            continue

        if not cells:
            continue

        if columns is None:
            columns = [map_header(h) if h.strip() else None for h in cells]
            continue

        row_number += 1
        if len(cells) < len(columns):
            result.errors.append(
                ParseIssue(
                    row_number,
                    "TooFewFields",
                    f"Expected {len(columns)} fields but parsed {len(cells)}",
                )
            )
        elif len(cells) > len(columns):
            result.errors.append(
                ParseIssue(
                    row_number,
                    "TooManyFields",
                    f"Expected {len(columns)} fields but parsed {len(cells)}",
                )
            )

        book = _record_to_book(_build_record(columns, cells))
        if not book.title:
            logger.debug(f"Skipping row {row_number}: no title")
            continue
        result.books.append(book)

    logger.debug(
        f"Parsed {len(result.books)} books with {len(result.errors)} issue(s)"
    )
    return result
