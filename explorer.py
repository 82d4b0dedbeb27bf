#!/usr/bin/env python3
"""Book Explorer CLI - OpenLibrary search statistics in the terminal."""
import argparse
import asyncio
import sys
import json
from tabulate import tabulate
from bookdash.aggregate import bucket_by_decade, compute_stats, top_author_frequencies
from bookdash.async_client import AsyncOpenLibraryClient
from bookdash.client import OpenLibraryClient
from bookdash.config import Config
from bookdash.fetch import AsyncSearchRunner, DetailViewController, ListViewController, LoadStatus
from bookdash.views import MISSING, author_value, detail_fields, status_message, summary_cards, table_rows
import logging

logger = logging.getLogger(__name__)


def configure_logging(config: Config):
    """Configure root logging once for the CLI."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


async def search_books_async(args, config: Config) -> ListViewController:
    """Search for books using async client."""
    controller = ListViewController()

    async with AsyncOpenLibraryClient(config=config) as client:
        runner = AsyncSearchRunner(controller, client.search_books)
        logger.info(f"Searching for: {args.query}")
        runner.submit(args.query)
        await runner.wait()

    return controller


def search_books_sync(args, config: Config) -> ListViewController:
    """Search for books using sync client."""
    controller = ListViewController()
    controller.set_query(args.query)

    with OpenLibraryClient(config=config) as client:
        logger.info(f"Searching for: {args.query}")
        controller.load(client)

    return controller


def run_search(args, config: Config) -> int:
    """Fetch, filter and display one search; returns the exit code."""
    if args.use_async:
        controller = asyncio.run(search_books_async(args, config))
    else:
        controller = search_books_sync(args, config)

    if controller.state.status is LoadStatus.SUCCESS:
        controller.select_author(author_value(args.author))

    books = controller.visible_books
    logger.info(f"Found {len(controller.books)} books, {len(books)} after filtering")

    if args.format == "json":
        print(json.dumps(search_payload(controller), indent=2, ensure_ascii=False))
    else:
        display_stats(books)
        message = status_message(controller.state, len(books))
        if message:
            print(message)
        else:
            display_books(books, args.format)

    return 1 if controller.state.status is LoadStatus.ERROR else 0


def search_payload(controller: ListViewController) -> dict:
    """JSON-ready snapshot of one list view."""
    books = controller.visible_books
    stats = compute_stats(books)
    return {
        "query": controller.query,
        "author": controller.selected_author,
        "error": controller.state.error,
        "stats": {
            "total": stats.total,
            "earliest": stats.earliest,
            "latest": stats.latest,
            "average": stats.average,
            "top_author": stats.top_author,
        },
        "decades": [{"decade": b.decade, "count": b.count} for b in bucket_by_decade(books)],
        "top_authors": [{"name": f.name, "count": f.count} for f in top_author_frequencies(books)],
        "books": [
            {
                "key": book.key,
                "title": book.title,
                "authors": book.author_names,
                "year": book.year,
                "cover_ref": book.cover_ref,
                "subjects": book.subjects,
            }
            for book in books
        ],
    }


def display_stats(books):
    """Print summary cards, decade histogram and top authors."""
    print("\n" + tabulate(summary_cards(compute_stats(books)), tablefmt="simple"))

    buckets = bucket_by_decade(books)
    if buckets:
        rows = [[f"{b.decade}s", b.count, "#" * b.count] for b in buckets]
        print("\n" + tabulate(rows, headers=["Decade", "Books", ""], tablefmt="simple"))

    freqs = top_author_frequencies(books)
    if freqs:
        rows = [[f.name, f.count] for f in freqs]
        print("\n" + tabulate(rows, headers=["Top author", "Books"], tablefmt="simple"))


def display_books(books, format_type: str):
    """Display books in specified format."""
    rows = table_rows(books)

    if format_type == "table":
        headers = ["Title", "Authors", "Year", "Subjects", "Cover", "Link"]
        table = [
            [
                _truncate(row.title, 50),
                _truncate(row.authors, 30),
                row.year,
                _truncate(row.subjects, 30),
                row.cover,
                row.path,
            ]
            for row in rows
        ]
        print("\n" + tabulate(table, headers=headers, tablefmt="grid"))

    elif format_type == "compact":
        for i, row in enumerate(rows, 1):
            print(f"{i}. {row.title} - {row.authors} ({row.year})")


def show_work(args, config: Config) -> int:
    """Fetch and display one work."""
    controller = DetailViewController()

    with OpenLibraryClient(config=config) as client:
        state = controller.load(client, args.work_id)

    if state.status is LoadStatus.ERROR:
        print(f"Error: {state.error}")
        return 1

    fields = detail_fields(controller.detail)
    if args.format == "json":
        print(json.dumps(
            {
                "work_id": controller.work_id,
                "title": controller.detail.title,
                "description": controller.detail.description,
                "subjects": controller.detail.subjects,
                "excerpts": fields.excerpts,
            },
            indent=2,
            ensure_ascii=False
        ))
        return 0

    print("\n" + "=" * 50)
    print(fields.title)
    print("=" * 50)
    print(f"Description:\n{fields.description}\n")
    print(f"Subjects:\n{fields.subjects}\n")
    print("Excerpts:")
    for excerpt in fields.excerpts or [MISSING]:
        print(f"  {excerpt}")
    print(f"\nSource: OpenLibrary Works API /works/{controller.work_id}.json")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Book Explorer - OpenLibrary search statistics CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search with stats and a result table
  %(prog)s search fantasy

  # Only books by one author, as JSON
  %(prog)s search "science fiction" --author "Isaac Asimov" --format json

  # Show one work
  %(prog)s work OL82563W
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search for books")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--author", default="All", help="Filter by author (default: All)")
    search_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    search_parser.add_argument("--async", dest="use_async", action="store_true", help="Use async client")

    # Work command
    work_parser = subparsers.add_parser("work", help="Show details of one work")
    work_parser.add_argument("work_id", help="Work id (OL82563W) or key (/works/OL82563W)")
    work_parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    configure_logging(config)

    try:
        if args.command == "search":
            code = run_search(args, config)
        else:
            code = show_work(args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
