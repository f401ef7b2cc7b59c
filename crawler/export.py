import json
import pandas as pd

from .models import Book


def books_to_records(books):
    """Serialize books to plain dicts, dropping a missing `image`."""
    return [b.to_dict() for b in books]


def write_json(books, path):
    """
    Write books to a JSON file as a list of objects.

    Args:
        books (list[Book]): Crawl result
        path (str): Output file path

    Note:
        Written as UTF-8 with non-ASCII kept, so prices keep their "£".
    """
    with open(path, "w", encoding="utf-8") as f:
        json.dump(books_to_records(books), f, indent=2, ensure_ascii=False)


def write_csv(books, path):
    """
    Write books as CSV, one row per record.

    `genres` is flattened to a "|"-joined string and a missing `image`
    becomes an empty cell, so every row has the same columns.
    """
    rows = []
    for record in books_to_records(books):
        record["genres"] = "|".join(record.get("genres", []))
        record.setdefault("image", "")
        rows.append(record)
    pd.DataFrame(rows, columns=list(Book.model_fields)).to_csv(path, index=False)
