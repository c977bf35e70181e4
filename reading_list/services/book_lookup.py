import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from reading_list import config
from reading_list.utils.books import Book, is_http_url, isbn13_to_isbn10, normalize_isbn

logger = logging.getLogger("reading_list")

# A search capability: query string -> parsed Google Books response (or None)
SearchFn = Callable[[str], Optional[Dict[str, Any]]]

# Preferred imageLinks variants, best first
IMAGE_LINK_KEYS = ("thumbnail", "smallThumbnail", "medium", "large", "extraLarge")

# Shared session for connection pooling and consistent headers.
_session: Optional[requests.Session] = None


def get_session() -> requests.Session:
    """Return the session used for every Google Books and sheet request.

    A thumbnail run makes up to four anonymous searches per book, one after
    another, so keeping a single keep-alive connection to googleapis.com
    keeps each lookup short and identifies the tool consistently.
    """
    global _session
    if _session is None:
        _session = requests.Session()
        _session.headers.update(
            {
                "User-Agent": "ReadingList/1.0 (personal reading list data tools)",
            }
        )
    return _session


def search_google_books(
    query: str,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[Dict[str, Any]]:
    """Run a Google Books volume search.

    Returns the decoded JSON body, or None for any failure. A 429 response
    waits out the rate-limit cooldown before returning None.
    """
    session = session or get_session()
    params: Dict[str, str] = {
        "q": query,
        "maxResults": str(config.GOOGLE_BOOKS_MAX_RESULTS),
    }
    try:
        response = session.get(
            config.GOOGLE_BOOKS_API_URL,
            params=params,
            timeout=config.GOOGLE_BOOKS_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.debug(f"Google Books search failed for {query!r}: {e}")
        return None

    if response.status_code == 429:
        logger.warning(
            f"Rate limited by Google Books, cooling down "
            f"{config.THUMBNAIL_RATE_LIMIT_COOLDOWN}s"
        )
        sleep(config.THUMBNAIL_RATE_LIMIT_COOLDOWN)
        return None

    if not response.ok:
        logger.debug(
            f"Google Books returned status {response.status_code} for {query!r}"
        )
        return None

    try:
        return response.json()
    except ValueError as e:
        logger.debug(f"Google Books returned invalid JSON for {query!r}: {e}")
        return None


def normalize_image_url(url: str) -> str:
    """Force HTTPS and drop the zoom parameter from a Google Books image URL."""
    url = re.sub(r"^http:", "https:", url)
    return re.sub(r"&zoom=\d+", "", url, count=1)


def extract_thumbnail(data: Optional[Dict[str, Any]]) -> Optional[str]:
    """Pick the cover image from the first result item that has one."""
    if not data:
        return None

    for item in data.get("items") or []:
        if not isinstance(item, dict):
            continue
        image_links = (item.get("volumeInfo") or {}).get("imageLinks")
        if not isinstance(image_links, dict):
            continue

        for key in IMAGE_LINK_KEYS:
            url = image_links.get(key)
            if url and isinstance(url, str):
                url = normalize_image_url(url)
                if is_http_url(url):
                    return url
                logger.debug(f"Ignoring malformed image URL {url!r}")
    return None


def thumbnail_queries(book: Book) -> List[Tuple[str, str]]:
    """Build the ordered (strategy, query) cascade for a book."""
    queries: List[Tuple[str, str]] = []
    title = book.title.strip()
    author = book.author.strip()

    isbn = normalize_isbn(book.isbn13)
    if isbn:
        queries.append(("ISBN-13", f"isbn:{isbn}"))
        isbn10 = isbn13_to_isbn10(isbn) if len(isbn) == 13 else None
        if isbn10:
            queries.append(("ISBN-10", f"isbn:{isbn10}"))

    if title and author:
        # Filters are space separated; requests sends the space as "+" in
        # the query string, which Google Books reads as an AND of both filters
        queries.append(("Title+Author", f'intitle:"{title}" inauthor:"{author}"'))

    if title:
        queries.append(("Title", f'intitle:"{title}"'))

    return queries


def find_thumbnail(book: Book, search: SearchFn = search_google_books) -> Optional[str]:
    """Try each lookup strategy in turn and return the first cover found."""
    for strategy, query in thumbnail_queries(book):
        logger.debug(f"  Trying {strategy} search: {query}")
        thumbnail = extract_thumbnail(search(query))
        if thumbnail:
            logger.debug(f"  {strategy} search found {thumbnail}")
            return thumbnail
    return None
