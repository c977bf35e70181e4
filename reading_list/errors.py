class ReadingListError(Exception):
    """Base class for errors that should stop a command."""


class BookStoreError(ReadingListError):
    """The books data file could not be read or written."""


class SheetFetchError(ReadingListError):
    """A published spreadsheet could not be downloaded."""
