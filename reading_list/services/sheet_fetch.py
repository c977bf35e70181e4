import logging

import requests

from reading_list import config
from reading_list.errors import SheetFetchError
from reading_list.services.book_lookup import get_session

logger = logging.getLogger("reading_list")


def fetch_published_csv(url: str) -> str:
    """Download a Google Sheet that was published to the web as CSV.

    Raises:
        SheetFetchError: On network errors or a non-2xx response.
    """
    session = get_session()
    try:
        response = session.get(url, timeout=config.GOOGLE_BOOKS_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise SheetFetchError(f"Failed to fetch sheet data from {url}: {e}") from e

    # Published sheets are UTF-8 but often served without a charset
    response.encoding = "utf-8"
    logger.debug(f"Fetched {len(response.text)} characters from {url}")
    return response.text
