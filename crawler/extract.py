from bs4 import BeautifulSoup
from urllib.parse import urljoin

from .models import Book, ListingCard, ListingPage

CARD_SELECTOR = ".product_pod"
NEXT_SELECTOR = ".next"
RATING_WORDS = ("One", "Two", "Three", "Four", "Five")

DEFAULT_TITLE = "Untitled"
DEFAULT_AUTHOR = "Unknown"


def _text(el):
    if el is None:
        return None
    return el.get_text()


def _attr(el, name):
    if el is None:
        return None
    value = el.get(name)
    return value if value else None


def extract_title(card):
    """
    Extract the full book title from the card heading link.

    The visible link text is truncated on the listing page, so the title
    comes from the `title` attribute of `h3 a`.

    Args:
        card (bs4.Tag): One `.product_pod` element

    Returns:
        str or None: Trimmed title, or None if the attribute is missing or blank
    """
    value = _attr(card.select_one("h3 a"), "title")
    if value is None:
        return None
    return value.strip() or None


def extract_href(card):
    """
    Extract the detail page link from the card heading.

    Args:
        card (bs4.Tag): One `.product_pod` element

    Returns:
        str or None: The raw `href` of `h3 a`, relative to the listing page,
            or None if absent
    """
    return _attr(card.select_one("h3 a"), "href")


def extract_price(card):
    """
    Extract the formatted price text (e.g. "£51.77") from `.price_color`.

    Args:
        card (bs4.Tag): One `.product_pod` element

    Returns:
        str or None: Trimmed price text, or None if the element is missing

    Note:
        The currency symbol is kept; no numeric conversion is done.
    """
    value = _text(card.select_one(".price_color"))
    if value is None:
        return None
    return value.strip() or None


def extract_availability(card):
    """
    Extract the stock text from `.instock.availability`.

    The element contains an icon and lots of indentation, so all whitespace
    runs are collapsed to single spaces and the ends trimmed.

    Args:
        card (bs4.Tag): One `.product_pod` element

    Returns:
        str or None: Text such as "In stock", or None if the element is missing
    """
    value = _text(card.select_one(".instock.availability"))
    if value is None:
        return None
    return " ".join(value.split()) or None


def extract_rating(card):
    """
    Return the word-form rating (One..Five) from the star-rating class list.

    Cards rendered as `<article class="product_pod star-rating Three">` carry
    the rating themselves; the usual markup nests it in
    `<p class="star-rating Three">`.
    """
    classes = card.get("class") or []
    if "star-rating" not in classes:
        el = card.select_one(".star-rating")
        classes = el.get("class", []) if el is not None else []
    for c in classes:
        if c in RATING_WORDS:
            return c
    return None


def extract_image_src(card):
    """Return the thumbnail `img` src relative to the listing page, or None."""
    return _attr(card.select_one("img"), "src")


def extract_card(card):
    """
    Run every field extractor over one card.

    Args:
        card (bs4.Tag): One `.product_pod` element

    Returns:
        ListingCard: Raw values, None for anything the card does not have
    """
    return ListingCard(
        title=extract_title(card),
        href=extract_href(card),
        price=extract_price(card),
        availability=extract_availability(card),
        rating=extract_rating(card),
        image_src=extract_image_src(card),
    )


def parse_listing(html, url):
    """Parse one catalogue page into its cards (document order) and next-page flag."""
    soup = BeautifulSoup(html, "lxml")
    cards = [extract_card(el) for el in soup.select(CARD_SELECTOR)]
    has_next = soup.select_one(NEXT_SELECTOR) is not None
    return ListingPage(url=url, cards=cards, has_next=has_next)


def absolute_url(page_url, ref):
    """
    Resolve a link or image path against the listing page it appeared on.

    Args:
        page_url (str): Absolute URL of the listing page
        ref (str): Path as found in the markup, e.g. "../media/cache/x.jpg"

    Returns:
        str: Absolute URL. An empty `ref` resolves to `page_url` itself.
    """
    return urljoin(page_url, ref)


def derive_book_id(link):
    """
    Canonical id of a book: the last two path segments of its detail URL.

    `http://books.toscrape.com/catalogue/sharp-objects_997/index.html`
    becomes `sharp-objects_997/index.html`. This only holds for the
    books.toscrape.com URL layout.
    """
    if link.endswith("/"):
        link = link[:-1]
    return "/".join(link.split("/")[-2:])


def normalize_card(card, page_url):
    """
    Turn a raw card into a Book. All "missing field" defaults live here.

    Args:
        card (ListingCard): values extracted from the card, None when absent
        page_url (str): URL of the listing page the card was found on

    Returns:
        Book: record with absolute link/image and its canonical id
    """
    link = absolute_url(page_url, card.href or "")
    image = absolute_url(page_url, card.image_src) if card.image_src else None
    return Book(
        id=derive_book_id(link),
        title=card.title or DEFAULT_TITLE,
        author=DEFAULT_AUTHOR,
        link=link,
        price=card.price or "",
        availability=card.availability or "",
        rating=card.rating or "",
        image=image,
    )
