import os
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

# Test environment configuration
os.environ.setdefault("THUMBNAIL_REQUEST_DELAY", "0")
os.environ.setdefault("THUMBNAIL_RATE_LIMIT_COOLDOWN", "0")

# Ensure the project root is importable when pytest changes CWD
PROJECT_ROOT = str(Path(__file__).resolve().parents[1])
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from reading_list import config  # noqa: E402


@pytest.fixture()
def runner():
    return CliRunner()


@pytest.fixture()
def data_paths(tmp_path, monkeypatch):
    """Point the CLI at a throwaway data file and backup."""
    data_file = tmp_path / "books.json"
    backup_file = tmp_path / "books.json.backup"
    monkeypatch.setattr(config, "PROJECT_ROOT", tmp_path)
    monkeypatch.setattr(config, "DATA_FILE", data_file)
    monkeypatch.setattr(config, "BACKUP_FILE", backup_file)
    monkeypatch.setattr(config, "THUMBNAIL_REQUEST_DELAY", 0)
    monkeypatch.setattr(config, "THUMBNAIL_RATE_LIMIT_COOLDOWN", 0)
    return data_file, backup_file


@pytest.fixture()
def books_response():
    """Build a Google Books search payload with one item per imageLinks dict."""

    def build(*image_links):
        items = []
        for links in image_links:
            info = {"title": "Some Book"}
            if links is not None:
                info["imageLinks"] = links
            items.append({"volumeInfo": info})
        return {"kind": "books#volumes", "totalItems": len(items), "items": items}

    return build
