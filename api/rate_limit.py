import os
from dotenv import load_dotenv
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from fastapi import FastAPI

load_dotenv()
BOOKS_RATE_LIMIT = os.getenv("BOOKS_RATE_LIMIT", "100/minute")
SCRAPE_RATE_LIMIT = os.getenv("SCRAPE_RATE_LIMIT", "10/minute")

limiter = Limiter(key_func=get_remote_address)


def register_rate_limit(app: FastAPI):
    """
    Attach the slowapi limiter to the app and register the 429 handler.

    Must be called before routes decorated with `limiter.limit` are hit.
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
