import argparse
import asyncio
import os
from datetime import datetime, timezone
from dotenv import load_dotenv
import logging

from .browser import PlaywrightSession
from .export import write_csv, write_json
from .extract import normalize_card

load_dotenv()
BASE_URL = "http://books.toscrape.com"
DEFAULT_LIMIT = 50
MAX_PAGES = int(os.getenv("CRAWL_MAX_PAGES", "1000"))

logger = logging.getLogger("crawler")
logger.setLevel(logging.INFO)
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
logger.addHandler(handler)


def page_url(page_number, base_url=BASE_URL):
    """Listing URL for a 1-based catalogue page number."""
    if page_number == 1:
        return f"{base_url}/"
    return f"{base_url}/catalogue/page-{page_number}.html"


class Crawler:
    def __init__(self, session_factory=PlaywrightSession, max_pages=MAX_PAGES):
        self.session_factory = session_factory
        self.max_pages = max_pages

    async def crawl(self, limit=DEFAULT_LIMIT, target_page=None):
        """
        Crawl catalogue listing pages and return deduplicated book records.

        Walks the catalogue from page 1 (or reads only `target_page`) inside a
        single browser session, turning every card into a Book and skipping
        cards whose id was already collected in this crawl.

        Args:
            limit (int): Maximum number of records to return, >= 1. Defaults to 50
            target_page (int, optional): Read only this listing page, >= 1

        Returns:
            list[Book]: At most `limit` records in catalogue order

        Raises:
            ValueError: If `limit` or `target_page` is below 1
            SessionError: If the browser session could not be started
            PageLoadError: If a listing page failed or timed out. Records
                from pages already read are discarded.

        Stops when:
            - `limit` records have been collected
            - the single `target_page` has been read
            - a page has no "next" link
            - `max_pages` pages have been read (malformed markup guard)
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if target_page is not None and target_page < 1:
            raise ValueError("target_page must be >= 1")

        results = []
        seen = set()
        current_page = target_page or 1
        pages_read = 0

        async with self.session_factory() as session:
            while len(results) < limit:
                url = page_url(current_page)
                logger.info(f"Listing page: {url}")
                listing = await session.fetch_listing(url)
                pages_read += 1

                for card in listing.cards:
                    book = normalize_card(card, url)
                    if book.id in seen:
                        logger.debug(f"Skipping duplicate book {book.id}")
                        continue
                    seen.add(book.id)
                    results.append(book)
                    if len(results) >= limit:
                        break

                if target_page is not None:
                    break
                if not listing.has_next:
                    break
                if pages_read >= self.max_pages:
                    logger.warning(
                        f"Stopping after {pages_read} pages, next link still present"
                    )
                    break
                current_page += 1

        logger.info(f"Crawled {len(results)} books from {pages_read} page(s)")
        return results[:limit]


# convenience script
async def main(argv=None):
    parser = argparse.ArgumentParser(description="Crawl books.toscrape.com")
    parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT)
    parser.add_argument("--page", type=int, default=None)
    parser.add_argument(
        "--output-dir", default=os.getenv("EXPORT_DIR", "./exports")
    )
    args = parser.parse_args(argv)

    books = await Crawler().crawl(limit=args.limit, target_page=args.page)

    os.makedirs(args.output_dir, exist_ok=True)
    filename_base = f"books_{datetime.now(timezone.utc).date().isoformat()}"
    json_path = os.path.join(args.output_dir, f"{filename_base}.json")
    csv_path = os.path.join(args.output_dir, f"{filename_base}.csv")
    write_json(books, json_path)
    write_csv(books, csv_path)
    logger.info(f"Wrote {len(books)} books to {json_path}, {csv_path}")
    return books


if __name__ == "__main__":
    asyncio.run(main())
