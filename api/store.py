import asyncio
import math


class BookStore:
    """
    In-memory holder for the most recent successful crawl.

    The whole list is swapped on `replace`; nothing is merged or persisted.
    `lock` lets callers serialize crawls that feed this store.
    """

    def __init__(self, books=None):
        self._books = list(books or [])
        self._by_id = {b.id: b for b in self._books}
        self.lock = asyncio.Lock()

    def __len__(self):
        return len(self._books)

    def all(self):
        """Return a copy of the stored books in crawl order."""
        return list(self._books)

    def replace(self, books):
        """
        Swap the stored books for a new crawl result.

        Args:
            books (list[Book]): Complete result of one successful crawl

        Note:
            Nothing is merged. Books missing from `books` are gone afterwards.
            Only call this after a crawl succeeded, so a failed crawl keeps
            the previous snapshot.
        """
        self._books = list(books)
        self._by_id = {b.id: b for b in self._books}

    def get(self, book_id):
        """
        Look up one book by its slug id.

        Args:
            book_id (str): Id such as "sharp-objects_997/index.html"

        Returns:
            Book or None: The stored book, or None if no book has that id
        """
        return self._by_id.get(book_id)

    def search(self, query):
        """Case-insensitive substring match on title or author."""
        q = (query or "").strip().lower()
        if not q:
            return self.all()
        return [
            b for b in self._books if q in b.title.lower() or q in b.author.lower()
        ]

    @staticmethod
    def paginate(books, page, limit):
        """
        Slice one page out of `books`.

        Returns:
            tuple: (items, total, total_pages)
        """
        start = (page - 1) * limit
        total = len(books)
        return books[start : start + limit], total, math.ceil(total / limit)

    def page(self, page, limit, query=None):
        """
        Search, then return one page of the results.

        Args:
            page (int): 1-based page number
            limit (int): Books per page, >= 1
            query (str, optional): Filter passed to `search`

        Returns:
            tuple: (items, total, total_pages). `items` is empty when `page`
                is past the end; `total_pages` is 0 for an empty store.
        """
        return self.paginate(self.search(query), page, limit)
