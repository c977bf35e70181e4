import json
from unittest.mock import MagicMock, patch

from reading_list.cli import cli
from reading_list.errors import BookStoreError, SheetFetchError

FEDERALIST_CSV = (
    "Title,Author,ISBN\n"
    '"The Federalist Papers","Alexander Hamilton","9780451528810"\n'
)


def test_convert_without_input_prints_usage(runner):
    result = runner.invoke(cli, ["convert"])

    assert result.exit_code == 1
    assert "Usage: reading-list convert" in result.output


def test_convert_file_to_stdout(runner, tmp_path):
    csv_path = tmp_path / "books.csv"
    csv_path.write_text(FEDERALIST_CSV, encoding="utf-8")

    result = runner.invoke(cli, ["convert", str(csv_path)])

    assert result.exit_code == 0
    books = json.loads(result.output)
    assert books[0]["title"] == "The Federalist Papers"
    assert books[0]["isbn13"] == "9780451528810"


def test_convert_reads_stdin(runner):
    result = runner.invoke(cli, ["convert", "-"], input=FEDERALIST_CSV)

    assert result.exit_code == 0
    assert json.loads(result.output)[0]["author"] == "Alexander Hamilton"


def test_convert_non_csv_argument_reads_stdin(runner):
    result = runner.invoke(cli, ["convert", "export.txt"], input=FEDERALIST_CSV)

    assert result.exit_code == 0
    assert len(json.loads(result.output)) == 1


def test_convert_writes_output_relative_to_project_root(runner, tmp_path, data_paths):
    csv_path = tmp_path / "export.csv"
    csv_path.write_text(FEDERALIST_CSV, encoding="utf-8")

    result = runner.invoke(cli, ["convert", str(csv_path), "src/data/books.json"])

    assert result.exit_code == 0
    assert "Converted 1 books to src/data/books.json" in result.output
    saved = json.loads((tmp_path / "src" / "data" / "books.json").read_text("utf-8"))
    assert saved[0]["title"] == "The Federalist Papers"


def test_convert_reports_parse_errors(runner, tmp_path, data_paths):
    csv_path = tmp_path / "export.csv"
    csv_path.write_text("Title,Author\nWalden\n", encoding="utf-8")

    result = runner.invoke(cli, ["convert", str(csv_path), "out.json"])

    assert result.exit_code == 0
    assert "CSV parsing errors" in result.output
    assert "TooFewFields" in result.output
    assert json.loads((tmp_path / "out.json").read_text("utf-8"))[0]["title"] == "Walden"


def test_convert_missing_input_file(runner, tmp_path):
    result = runner.invoke(cli, ["convert", str(tmp_path / "missing.csv")])

    assert result.exit_code == 1
    assert "Error reading" in result.output


@patch("reading_list.cli.fetch_published_csv")
def test_import_sheet(mock_fetch, runner):
    mock_fetch.return_value = FEDERALIST_CSV

    result = runner.invoke(cli, ["import-sheet", "https://example.com/pub?output=csv"])

    assert result.exit_code == 0
    assert json.loads(result.output)[0]["title"] == "The Federalist Papers"
    mock_fetch.assert_called_once_with("https://example.com/pub?output=csv")


@patch("reading_list.cli.fetch_published_csv")
def test_import_sheet_download_failure(mock_fetch, runner):
    mock_fetch.side_effect = SheetFetchError("Failed to fetch sheet data")

    result = runner.invoke(cli, ["import-sheet", "https://example.com/pub?output=csv"])

    assert result.exit_code == 1
    assert "Failed to fetch sheet data" in result.output


def _google_books_session(payload):
    response = MagicMock()
    response.status_code = 200
    response.ok = True
    response.json.return_value = payload
    session = MagicMock()
    session.get.return_value = response
    return session


@patch("reading_list.services.book_lookup.get_session")
def test_fetch_thumbnails(mock_get_session, runner, data_paths, books_response):
    data_file, backup_file = data_paths
    original = [
        {"title": "Walden", "author": "Thoreau", "isbn13": "9780486284958", "thumbnail": ""},
        {"title": "Common Sense", "thumbnail": "https://img/cs.jpg", "shelf": "A3"},
    ]
    data_file.write_text(json.dumps(original, indent=2), encoding="utf-8")
    mock_get_session.return_value = _google_books_session(
        books_response({"thumbnail": "http://books.google.com/cover.jpg&zoom=1"})
    )

    result = runner.invoke(cli, ["fetch-thumbnails"])

    assert result.exit_code == 0, result.output
    saved = json.loads(data_file.read_text(encoding="utf-8"))
    assert saved[0]["thumbnail"] == "https://books.google.com/cover.jpg"
    assert saved[1]["thumbnail"] == "https://img/cs.jpg"
    assert saved[1]["shelf"] == "A3"

    backup = json.loads(backup_file.read_text(encoding="utf-8"))
    assert backup[0]["thumbnail"] == ""

    assert "Updated: 1" in result.output
    assert "Skipped: 1" in result.output
    assert "Failed: 0" in result.output
    assert mock_get_session.return_value.get.call_count == 1


@patch("reading_list.services.book_lookup.get_session")
def test_fetch_thumbnails_failures_still_exit_zero(
    mock_get_session, runner, data_paths
):
    data_file, _ = data_paths
    data_file.write_text(json.dumps([{"title": "Obscure Pamphlet"}]), encoding="utf-8")
    mock_get_session.return_value = _google_books_session({"totalItems": 0})

    result = runner.invoke(cli, ["fetch-thumbnails"])

    assert result.exit_code == 0
    assert "Failed: 1" in result.output
    assert json.loads(data_file.read_text("utf-8"))[0]["thumbnail"] == ""


def test_fetch_thumbnails_missing_data_file(runner, data_paths):
    result = runner.invoke(cli, ["fetch-thumbnails"])

    assert result.exit_code == 1
    assert "Error reading books.json" in result.output


def test_fetch_thumbnails_backup_failure_continues(runner, data_paths, monkeypatch):
    data_file, _ = data_paths
    data_file.write_text(
        json.dumps([{"title": "Walden", "thumbnail": "https://img/w.jpg"}]),
        encoding="utf-8",
    )
    from reading_list import config

    monkeypatch.setattr(config, "BACKUP_FILE", data_file.parent / "nope" / "b.json")

    result = runner.invoke(cli, ["fetch-thumbnails"])

    assert result.exit_code == 0
    assert "Could not create backup" in result.output
    assert "Skipped: 1" in result.output


def test_convert_input_not_utf8(runner, tmp_path):
    csv_path = tmp_path / "bad.csv"
    csv_path.write_bytes(b"Title\n\xff\xfeWalden\n")

    result = runner.invoke(cli, ["convert", str(csv_path)])

    assert result.exit_code == 1
    assert not isinstance(result.exception, UnicodeDecodeError)
    assert "Error reading" in result.output


@patch("reading_list.services.book_lookup.get_session")
def test_fetch_thumbnails_leaves_other_data_alone(
    mock_get_session, runner, data_paths
):
    data_file, backup_file = data_paths
    raw = (
        '[{"title":"Walden","thumbnail":"https://img/w.jpg",'
        '"firstPublished":"1854","pageCount":null},"a stray note"]'
    )
    data_file.write_text(raw, encoding="utf-8")
    mock_get_session.return_value = _google_books_session({"totalItems": 0})

    result = runner.invoke(cli, ["fetch-thumbnails"])

    assert result.exit_code == 0, result.output
    assert json.loads(data_file.read_text(encoding="utf-8")) == json.loads(raw)
    assert backup_file.read_text(encoding="utf-8") == raw
    mock_get_session.return_value.get.assert_not_called()


@patch("reading_list.services.book_lookup.get_session")
def test_fetch_thumbnails_keeps_wrapped_shape(
    mock_get_session, runner, data_paths, books_response
):
    data_file, _ = data_paths
    data_file.write_text(
        json.dumps({"books": [{"title": "Walden", "author": "Thoreau"}]}),
        encoding="utf-8",
    )
    mock_get_session.return_value = _google_books_session(
        books_response({"thumbnail": "http://img/walden.jpg"})
    )

    result = runner.invoke(cli, ["fetch-thumbnails"])

    assert result.exit_code == 0, result.output
    assert json.loads(data_file.read_text(encoding="utf-8")) == {
        "books": [
            {
                "title": "Walden",
                "author": "Thoreau",
                "thumbnail": "https://img/walden.jpg",
            }
        ]
    }


@patch("reading_list.cli.save_book_file")
def test_fetch_thumbnails_write_failure_exits_one(mock_save, runner, data_paths):
    data_file, _ = data_paths
    data_file.write_text(
        json.dumps([{"title": "Walden", "thumbnail": "https://img/w.jpg"}]),
        encoding="utf-8",
    )
    mock_save.side_effect = BookStoreError(f"Could not write {data_file}")

    result = runner.invoke(cli, ["fetch-thumbnails"])

    assert result.exit_code == 1
    assert "Error writing books.json" in result.output
    mock_save.assert_called_once()
