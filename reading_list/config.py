"""Tool configuration read from the environment (and an optional .env file)."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Relative data paths are resolved against the project root, which defaults
# to the directory holding the reading_list package.
PROJECT_ROOT = Path(
    os.environ.get("READING_LIST_ROOT", Path(__file__).resolve().parents[1])
)

DATA_FILE = Path(
    os.environ.get(
        "READING_LIST_DATA_FILE", PROJECT_ROOT / "src" / "data" / "books.json"
    )
)
BACKUP_FILE = Path(
    os.environ.get("READING_LIST_BACKUP_FILE", f"{DATA_FILE}.backup")
)

GOOGLE_BOOKS_API_URL = os.environ.get(
    "GOOGLE_BOOKS_API_URL", "https://www.googleapis.com/books/v1/volumes"
)
GOOGLE_BOOKS_MAX_RESULTS = int(os.environ.get("GOOGLE_BOOKS_MAX_RESULTS", "5"))
GOOGLE_BOOKS_TIMEOUT = float(os.environ.get("GOOGLE_BOOKS_TIMEOUT", "10"))

# Seconds to wait between records, and after a 429 response
THUMBNAIL_REQUEST_DELAY = float(os.environ.get("THUMBNAIL_REQUEST_DELAY", "0.2"))
THUMBNAIL_RATE_LIMIT_COOLDOWN = float(
    os.environ.get("THUMBNAIL_RATE_LIMIT_COOLDOWN", "1.0")
)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING").upper()


def resolve_path(path: str) -> Path:
    """Resolve a user supplied path against the project root."""
    return PROJECT_ROOT / Path(path).expanduser()
