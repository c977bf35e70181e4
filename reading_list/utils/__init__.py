from .books import Book, isbn13_to_isbn10, normalize_isbn, parse_int
from .sheet_import import HEADER_MAP, parse_sheet_csv

__all__ = [
    "Book",
    "HEADER_MAP",
    "isbn13_to_isbn10",
    "normalize_isbn",
    "parse_int",
    "parse_sheet_csv",
]
