"""CLI script for querying the recommendation and aggregation engines.

Useful for checking a dataset without starting the server. Loads the
datasets, runs one query and prints the result as JSON.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bookrec.exceptions import BookRecException
from bookrec.recommender.utils import load_library

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def run_query(args: argparse.Namespace):
    """Run the query selected on the command line and return its result."""
    library = load_library(args.data_dir)

    if args.command == "genres":
        return [
            book.model_dump(by_alias=True, exclude_unset=True)
            for book in library.recommender.recommend_by_genres(args.genres)
        ]
    if args.command == "similar":
        books = library.recommender.recommend_multi_criteria(
            author=args.author,
            genres=args.genre,
            exclude_title=args.title,
            series=args.series,
        )
        return [book.model_dump(by_alias=True, exclude_unset=True) for book in books]
    if args.command == "top-genres":
        return library.aggregator.top_genres(args.limit)
    if args.command == "top-books":
        return library.aggregator.top_books(args.limit)
    if args.command == "book":
        return library.catalog.by_id(args.book_id).model_dump(by_alias=True, exclude_unset=True)
    if args.command == "vocabulary":
        return library.catalog.distinct_genres()

    raise ValueError(f"Unknown command: {args.command}")


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Query the BookRec engines from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/recommend_cli.py genres 科幻 悬疑
  python scripts/recommend_cli.py similar --author 刘慈欣 --genre 科幻 --title 三体
  python scripts/recommend_cli.py top-genres --limit 5
  python scripts/recommend_cli.py book 3
        """
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory containing books.json, record.json and announcement.json"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    genres_parser = subparsers.add_parser("genres", help="Books matching any genre token")
    genres_parser.add_argument("genres", nargs="+")

    similar_parser = subparsers.add_parser("similar", help="Books similar to a given one")
    similar_parser.add_argument("--author", required=True)
    similar_parser.add_argument("--genre", action="append", default=[])
    similar_parser.add_argument("--series", default=None)
    similar_parser.add_argument("--title", default=None, help="Title to exclude")

    top_genres_parser = subparsers.add_parser("top-genres", help="Most borrowed genres")
    top_genres_parser.add_argument("--limit", type=int, default=3)

    top_books_parser = subparsers.add_parser("top-books", help="Most borrowed titles")
    top_books_parser.add_argument("--limit", type=int, default=5)

    book_parser = subparsers.add_parser("book", help="One book by id")
    book_parser.add_argument("book_id", type=int)

    subparsers.add_parser("vocabulary", help="Every distinct genre token")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        result = run_query(args)
    except BookRecException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
