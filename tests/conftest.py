import sys
import os

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT_DIR)

import pytest
from httpx import ASGITransport, AsyncClient

from api.main import app, get_crawler
from api.rate_limit import limiter
from api.store import BookStore
from crawler.crawler import Crawler, page_url
from crawler.errors import PageLoadError
from crawler.models import Book, ListingCard, ListingPage


class FakeSession:
    """
    Stand-in for PlaywrightSession serving canned listing pages.

    Calling the instance returns itself, so it can be passed directly as a
    Crawler `session_factory`.

    Args:
        pages (dict): listing URL -> ListingPage
        failures (dict, optional): listing URL -> exception raised on fetch
        enter_error (Exception, optional): raised when the session is opened
    """

    def __init__(self, pages, failures=None, enter_error=None):
        self.pages = pages
        self.failures = failures or {}
        self.enter_error = enter_error
        self.visited = []
        self.opened = 0
        self.closed = 0

    def __call__(self):
        return self

    async def __aenter__(self):
        if self.enter_error is not None:
            raise self.enter_error
        self.opened += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed += 1

    async def fetch_listing(self, url):
        self.visited.append(url)
        if url in self.failures:
            raise self.failures[url]
        if url not in self.pages:
            raise PageLoadError(f"Failed to load {url}: 404", url=url)
        return self.pages[url]


def make_card(slug, page_number, rating="Three", **overrides):
    """Card as it appears on `page_number` (hrefs are relative to that page)."""
    prefix = "catalogue/" if page_number == 1 else ""
    media = "" if page_number == 1 else "../"
    values = {
        "title": slug.replace("-", " ").title(),
        "href": f"{prefix}{slug}/index.html",
        "price": "£10.00",
        "availability": "In stock",
        "rating": rating,
        "image_src": f"{media}media/cache/{slug}.jpg",
    }
    values.update(overrides)
    return ListingCard(**values)


@pytest.fixture
def catalogue_pages():
    """
    Three listing pages, three cards each, eight distinct books.

    Page 2 repeats `alpha_1` from page 1; page 3 has no next link.
    """
    return {
        page_url(1): ListingPage(
            url=page_url(1),
            cards=[make_card(s, 1) for s in ("alpha_1", "bravo_2", "charlie_3")],
            has_next=True,
        ),
        page_url(2): ListingPage(
            url=page_url(2),
            cards=[make_card(s, 2) for s in ("delta_4", "alpha_1", "echo_5")],
            has_next=True,
        ),
        page_url(3): ListingPage(
            url=page_url(3),
            cards=[make_card(s, 3) for s in ("foxtrot_6", "golf_7", "hotel_8")],
            has_next=False,
        ),
    }


@pytest.fixture
def fake_session(catalogue_pages):
    return FakeSession(catalogue_pages)


@pytest.fixture
def sample_books():
    return [
        Book(
            id="alpha_1/index.html",
            title="Alpha",
            link="http://books.toscrape.com/catalogue/alpha_1/index.html",
            price="£10.00",
            rating="Four",
        ),
        Book(
            id="beta_2/index.html",
            title="Beta",
            link="http://books.toscrape.com/catalogue/beta_2/index.html",
            price="£20.00",
            rating="Five",
            image="http://books.toscrape.com/media/cache/beta_2.jpg",
        ),
        Book(
            id="gamma_3/index.html",
            title="Gamma Rays",
            link="http://books.toscrape.com/catalogue/gamma_3/index.html",
            price="£15.00",
            rating="Three",
        ),
    ]


@pytest.fixture
def store(sample_books):
    return BookStore(sample_books)


@pytest.fixture
async def client(store, fake_session):
    """
    Async test client with an injected store and a crawler on fake pages.

    The rate limiter is reset so limits do not leak between tests.
    """
    previous_store = app.state.store
    app.state.store = store
    app.dependency_overrides[get_crawler] = lambda: Crawler(
        session_factory=fake_session
    )
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.store = previous_store
