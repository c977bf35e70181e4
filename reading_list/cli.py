"""Command line entry points for the reading list data tools."""

import logging
from typing import List, Optional

import click

from reading_list import config
from reading_list.errors import ReadingListError
from reading_list.services.book_store import (
    backup_file,
    dump_books,
    load_book_file,
    save_book_file,
    save_books,
)
from reading_list.services.sheet_fetch import fetch_published_csv
from reading_list.services.thumbnails import resolve_thumbnails
from reading_list.utils.books import Book
from reading_list.utils.sheet_import import parse_sheet_csv

logger = logging.getLogger("reading_list")

CONVERT_USAGE = (
    "Usage: reading-list convert <input.csv> [output.json]\n"
    "   or: cat input.csv | reading-list convert - > output.json"
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Data tools for the reading list."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def _convert_csv(csv_text: str, output_path: Optional[str]) -> None:
    """Normalise CSV text and write the books to OUTPUT or stdout."""
    result = parse_sheet_csv(csv_text)

    if result.errors:
        click.echo("CSV parsing errors:", err=True)
        for issue in result.errors:
            click.echo(f"  {issue}", err=True)

    _write_books(result.books, output_path)


def _write_books(books: List[Book], output_path: Optional[str]) -> None:
    if not output_path:
        click.echo(dump_books(books))
        return

    save_books(books, config.resolve_path(output_path))
    click.echo(f"✓ Converted {len(books)} books to {output_path}", err=True)


@cli.command()
@click.argument("input_path", required=False)
@click.argument("output_path", required=False)
@click.pass_context
def convert(
    ctx: click.Context, input_path: Optional[str], output_path: Optional[str]
) -> None:
    """Convert a spreadsheet CSV export to the books JSON format.

    INPUT_PATH is a .csv file, or '-' to read from standard input.
    Without OUTPUT_PATH the JSON is printed to standard output.
    """
    if not input_path:
        click.echo(CONVERT_USAGE, err=True)
        ctx.exit(1)

    try:
        if input_path == "-" or not input_path.endswith(".csv"):
            logger.debug("Reading CSV from standard input")
            csv_text = click.get_text_stream("stdin").read()
        else:
            with open(input_path, encoding="utf-8") as f:
                csv_text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"❌ Error reading {input_path}: {e}", err=True)
        ctx.exit(1)

    try:
        _convert_csv(csv_text, output_path)
    except ReadingListError as e:
        click.echo(f"❌ {e}", err=True)
        ctx.exit(1)


@cli.command("import-sheet")
@click.argument("url")
@click.argument("output_path", required=False)
@click.pass_context
def import_sheet(ctx: click.Context, url: str, output_path: Optional[str]) -> None:
    """Download a sheet published to the web as CSV and convert it."""
    try:
        _convert_csv(fetch_published_csv(url), output_path)
    except ReadingListError as e:
        click.echo(f"❌ {e}", err=True)
        ctx.exit(1)


@cli.command("fetch-thumbnails")
@click.pass_context
def fetch_thumbnails(ctx: click.Context) -> None:
    """Look up missing cover thumbnails on Google Books and save them."""
    data_file = config.DATA_FILE
    backup_path = config.BACKUP_FILE

    click.echo("📚 Fetching book thumbnails from Google Books API\n")

    try:
        book_file = load_book_file(data_file)
    except ReadingListError as e:
        click.echo(f"❌ Error reading books.json: {e}", err=True)
        ctx.exit(1)

    if backup_file(data_file, backup_path):
        click.echo(f"✓ Created backup: {backup_path}\n")
    else:
        click.echo("⚠️  Could not create backup, continuing", err=True)

    books = book_file.books
    summary = resolve_thumbnails(books)

    try:
        save_book_file(book_file, data_file)
    except ReadingListError as e:
        click.echo(f"❌ Error writing books.json: {e}", err=True)
        ctx.exit(1)

    click.echo(f"\n✅ Updated {len(books)} books")
    click.echo(f"   ✓ Updated: {summary.updated}")
    click.echo(f"   ⊘ Skipped: {summary.skipped}")
    click.echo(f"   ✗ Failed: {summary.failed}")
    click.echo(f"\n📁 Saved to: {data_file}")
