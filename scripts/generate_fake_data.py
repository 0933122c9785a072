"""Generate a fake book catalog and borrow history for development.

Writes ``books.json``, ``record.json`` and ``announcement.json`` in the
shape the service loads at startup. Raw genre strings deliberately mix
ASCII and full-width commas, and a few books carry a malformed ``genre``
field, so the tokenizer's edge cases show up in local runs.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py --output-dir data

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_books
        books = generate_fake_books(num_books=50)
"""

import argparse
import json
import random
from pathlib import Path
from typing import Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_BOOKS = 60
DEFAULT_NUM_RECORDS = 500
DEFAULT_NUM_BORROWERS = 40
MALFORMED_GENRE_RATE = 0.05
UNRETURNED_RATE = 0.1

GENRES = ["科幻", "悬疑", "推理", "奇幻", "冒险", "小说", "历史", "温情", "Sci-Fi", "Romance"]
AUTHORS = ["刘慈欣", "东野圭吾", "J.K.罗琳", "余华", "儒勒·凡尔纳", "金庸", "Ursula K. Le Guin"]
SERIES = ["地球往事", "哈利·波特", "射雕三部曲", "Earthsea", None, None, None]


def _raw_genre(rng: random.Random) -> list:
    """Build a raw genre list, sometimes packing several genres per entry."""
    picked = rng.sample(GENRES, k=rng.randint(1, 3))
    if len(picked) > 1 and rng.random() < 0.6:
        delimiter = rng.choice([",", "，", ", "])
        return [delimiter.join(picked)]
    return picked


def generate_fake_books(
    num_books: int = DEFAULT_NUM_BOOKS,
    random_seed: Optional[int] = None,
) -> pd.DataFrame:
    """Generate a synthetic catalog.

    Args:
        num_books: Number of books. Must be positive.
        random_seed: Seed for reproducible output.

    Returns:
        DataFrame with columns id, title, author, series, genre, coverUrl.
        Ids run from 1 to ``num_books``.

    Raises:
        ValueError: If ``num_books`` is not positive.
    """
    if num_books <= 0:
        raise ValueError("num_books must be positive")

    rng = random.Random(random_seed)
    books = []
    for book_id in range(1, num_books + 1):
        if rng.random() < MALFORMED_GENRE_RATE:
            genre = rng.choice([None, "小说", 42])
        else:
            genre = _raw_genre(rng)

        books.append({
            "id": book_id,
            "title": f"Book {book_id:03d}",
            "author": rng.choice(AUTHORS),
            "series": rng.choice(SERIES),
            "genre": genre,
            "coverUrl": f"https://example.com/covers/{book_id}.jpg",
        })

    return pd.DataFrame(books)


def generate_fake_records(
    books: pd.DataFrame,
    num_records: int = DEFAULT_NUM_RECORDS,
    num_borrowers: int = DEFAULT_NUM_BORROWERS,
    random_seed: Optional[int] = None,
) -> pd.DataFrame:
    """Generate borrow records for books drawn from ``books``.

    Popularity is skewed so the top-N rankings are not all ties. About
    ``UNRETURNED_RATE`` of records have no borrower.
    """
    if num_records <= 0 or num_borrowers <= 0:
        raise ValueError("num_records and num_borrowers must be positive")

    rng = random.Random(random_seed)
    weights = [1.0 / rank for rank in range(1, len(books) + 1)]
    picked = books.sample(n=num_records, replace=True, weights=weights, random_state=random_seed)

    records = pd.DataFrame({
        "title": picked["title"].values,
        "genre": picked["genre"].values,
        "borrower": [
            None if rng.random() < UNRETURNED_RATE else f"u{rng.randint(1, num_borrowers):03d}"
            for _ in range(num_records)
        ],
    })
    return records


def _write_records(df: pd.DataFrame, path: Path) -> None:
    # Missing values are left out of the JSON objects rather than written as null
    rows = [
        {key: value for key, value in row.items() if value is not None}
        for row in df.astype(object).where(df.notna(), None).to_dict(orient="records")
    ]
    with path.open("w", encoding="utf-8") as f:
        # numpy scalars are unwrapped with .item()
        json.dump(rows, f, ensure_ascii=False, indent=2, default=lambda o: o.item())


def main() -> None:
    """Generate the three datasets and print a short summary."""
    parser = argparse.ArgumentParser(description="Generate fake BookRec datasets")
    parser.add_argument("--output-dir", default=str(Path(__file__).parent.parent / "data"))
    parser.add_argument("--num-books", type=int, default=DEFAULT_NUM_BOOKS)
    parser.add_argument("--num-records", type=int, default=DEFAULT_NUM_RECORDS)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    print(f"Generating {args.num_books} books and {args.num_records} borrow records...")

    try:
        books = generate_fake_books(args.num_books, random_seed=args.seed)
        records = generate_fake_records(books, args.num_records, random_seed=args.seed)
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    _write_records(books, output_dir / "books.json")
    _write_records(records, output_dir / "record.json")
    with (output_dir / "announcement.json").open("w", encoding="utf-8") as f:
        json.dump({"title": "Announcement", "items": []}, f, ensure_ascii=False, indent=2)

    print(f"\nData generated successfully!")
    print(f"Saved to: {output_dir}")
    print(f"\nData summary:")
    print(f"  Books: {len(books)}")
    print(f"  Borrow records: {len(records)}")
    print(f"  Records with borrower: {records['borrower'].notna().sum()}")
    print(f"  Distinct borrowed titles: {records['title'].nunique()}")


if __name__ == '__main__':
    main()
