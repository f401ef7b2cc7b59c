from fastapi import FastAPI, Depends, Query, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
import os
from dotenv import load_dotenv
from .rate_limit import register_rate_limit, limiter, BOOKS_RATE_LIMIT, SCRAPE_RATE_LIMIT
from .store import BookStore
from crawler.crawler import Crawler, DEFAULT_LIMIT
from crawler.errors import CrawlError
import logging

load_dotenv()
API_PORT = int(os.getenv("API_PORT", "5000"))

app = FastAPI(title="Books Scraper API", version="1.0")
app.state.store = BookStore()

register_rate_limit(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

logger = logging.getLogger("api")
logger.setLevel(logging.INFO)


def get_store(request: Request) -> BookStore:
    return request.app.state.store


def get_crawler() -> Crawler:
    return Crawler()


@app.get("/health")
async def health(store: BookStore = Depends(get_store)):
    return {"status": "ok", "books": len(store)}


@app.get("/api/books")
@app.get("/api/books/")
@limiter.limit(BOOKS_RATE_LIMIT)
async def list_books(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=200),
    q: Optional[str] = Query(None),
    store: BookStore = Depends(get_store),
):
    """
    List the books from the last successful scrape, one page at a time.

    Args:
        request (Request): FastAPI request object (required for rate limiting)
        page (int): Page number, must be >= 1. Defaults to 1
        limit (int): Books per page, must be 1-200. Defaults to 10
        q (str, optional): Case-insensitive filter on title or author,
            applied before paging

    Returns:
        JSONResponse: {success, page, limit, totalItems, totalPages, data}

    Note:
        Returns an empty page (not an error) before the first scrape or when
        `page` is past the end.
    """
    items, total, total_pages = store.page(page, limit, q)
    return JSONResponse(
        {
            "success": True,
            "page": page,
            "limit": limit,
            "totalItems": total,
            "totalPages": total_pages,
            "data": [b.to_dict() for b in items],
        }
    )


@app.get("/api/books/scrape")
@limiter.limit(SCRAPE_RATE_LIMIT)
async def scrape_books(
    request: Request,
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    page: Optional[int] = Query(None, ge=1),
    store: BookStore = Depends(get_store),
    crawler: Crawler = Depends(get_crawler),
):
    """
    Crawl the catalogue now and replace the stored books with the result.

    Scrapes are serialized on the store's lock, so concurrent calls run one
    after another and the last to finish is what /api/books serves.

    Args:
        request (Request): FastAPI request object (required for rate limiting)
        limit (int): Maximum number of books to crawl. Defaults to 50
        page (int, optional): Crawl only this catalogue page

    Returns:
        JSONResponse: {success, message, booksScraped, data} on success,
            or status 500 with {success: false, error} if the crawl failed.
            A failed crawl leaves the stored books untouched.
    """
    async with store.lock:
        try:
            books = await crawler.crawl(limit=limit, target_page=page)
        except CrawlError as e:
            logger.error(f"Scrape failed: {e.message}")
            return JSONResponse(
                {"success": False, "error": e.message}, status_code=500
            )
        except Exception as e:
            logger.exception(f"Scrape failed unexpectedly: {e}")
            return JSONResponse({"success": False, "error": str(e)}, status_code=500)
        store.replace(books)

    logger.info(f"Scrape stored {len(books)} books")
    return JSONResponse(
        {
            "success": True,
            "message": "Scraping completed successfully",
            "booksScraped": len(books),
            "data": [b.to_dict() for b in books],
        }
    )


@app.get("/api/books/{book_id:path}")
@limiter.limit(BOOKS_RATE_LIMIT)
async def get_book(
    request: Request, book_id: str, store: BookStore = Depends(get_store)
):
    """Return one stored book by its slug id (ids contain "/"), or 404."""
    book = store.get(book_id)
    if book is None:
        return JSONResponse(
            {"success": False, "error": "Book not found"}, status_code=404
        )
    return book.to_dict()


# Run uvicorn externally or here
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=API_PORT, reload=True)
