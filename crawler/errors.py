class CrawlError(Exception):
    """Raised when a crawl cannot complete. Callers only need to catch this."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class SessionError(CrawlError):
    """The browser session or its page could not be created."""


class PageLoadError(CrawlError):
    """A listing page failed to load or its cards never appeared."""

    def __init__(self, message, url=None):
        super().__init__(message)
        self.url = url
