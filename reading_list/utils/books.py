import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Canonical JSON property name -> dataclass attribute name
BOOK_FIELDS: Dict[str, str] = {
    "title": "title",
    "author": "author",
    "firstPublished": "first_published",
    "category": "category",
    "isbn13": "isbn13",
    "description": "description",
    "pageCount": "page_count",
    "publisher": "publisher",
    "thumbnail": "thumbnail",
    "buyLink": "buy_link",
}

INTEGER_FIELDS = ("firstPublished", "pageCount")


@dataclass
class Book:
    """One entry in the reading list.

    Serialises to the camelCase shape the website reads from books.json.
    Columns the importer does not recognise are kept in ``extra`` and written
    back out next to the canonical fields.
    """

    title: str = ""
    author: str = ""
    first_published: int = 0
    category: str = ""
    isbn13: str = ""
    description: str = ""
    page_count: int = 0
    publisher: str = ""
    thumbnail: str = ""
    buy_link: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Book":
        """Build a Book from a books.json entry, filling gaps with defaults."""
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            attr = BOOK_FIELDS.get(key)
            if attr is None:
                extra[key] = value
            elif key in INTEGER_FIELDS:
                values[attr] = parse_int(value)
            else:
                values[attr] = "" if value is None else str(value)
        return cls(extra=extra, **values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON record shape."""
        data: Dict[str, Any] = {
            key: getattr(self, attr) for key, attr in BOOK_FIELDS.items()
        }
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    def has_thumbnail(self) -> bool:
        return bool(self.thumbnail and self.thumbnail.strip())


def parse_int(value: Any) -> int:
    """Parse the leading integer out of a spreadsheet cell.

    Mirrors how spreadsheet exports are usually read: '350' and '350 pages'
    both give 350, while empty or non-numeric cells give 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)

    match = re.match(r"\s*([+-]?\d+)", str(value))
    if not match:
        return 0
    return int(match.group(1))


def normalize_isbn(isbn: Optional[str]) -> str:
    """Remove hyphens and whitespace from an ISBN."""
    if not isbn:
        return ""
    return re.sub(r"[\s-]", "", str(isbn))


def isbn13_to_isbn10(isbn13: str) -> Optional[str]:
    """Convert ISBN-13 to ISBN-10.

    Drops the three digit prefix and the ISBN-13 check digit, then appends
    the ISBN-10 check digit for the remaining nine digit body.
    """
    clean = normalize_isbn(isbn13)
    if len(clean) != 13:
        return None

    core = clean[3:12]
    if not core.isdigit():
        return None

    total = 0
    for i, digit in enumerate(core):
        total += int(digit) * (10 - i)

    check_digit = (11 - (total % 11)) % 11
    return core + ("X" if check_digit == 10 else str(check_digit))


def is_http_url(url: Optional[str]) -> bool:
    """Check that a string looks like an absolute http(s) URL."""
    if not url:
        return False
    return bool(re.match(r"^https?://[^\s/$.?#][^\s]*$", url, re.IGNORECASE))
