"""HTTP fetcher for remote ICS feeds with conditional GET support."""

import logging

import requests

from icalsync.constants import ACCEPT_HEADER, USER_AGENT
from icalsync.exceptions import FetchFailedError
from icalsync.models.sync import FetchResult

logger = logging.getLogger(__name__)


def normalize_feed_url(url: str) -> str:
    """Rewrite webcal:// and webcals:// subscription links to https://."""
    lowered = url.lower()
    for scheme in ("webcals://", "webcal://"):
        if lowered.startswith(scheme):
            return "https://" + url[len(scheme) :]
    return url


class FeedFetcher:
    """Fetches remote calendar feeds over HTTP."""

    def __init__(self, timeout: float = 20.0, session: requests.Session | None = None):
        """
        Initialize fetcher.

        Args:
            timeout: Request timeout in seconds
            session: Optional requests session (one is created if omitted)
        """
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(
        self,
        url: str,
        etag: str | None = None,
        last_modified: str | None = None,
    ) -> FetchResult:
        """
        Conditionally GET a feed.

        Args:
            url: Feed URL (webcal:// accepted)
            etag: Cached ETag sent as If-None-Match
            last_modified: Cached Last-Modified sent as If-Modified-Since

        Returns:
            FetchResult with status 200 and body, or 304 without body

        Raises:
            FetchFailedError: On transport errors, timeouts, or other statuses
        """
        headers = {"User-Agent": USER_AGENT, "Accept": ACCEPT_HEADER}
        if etag:
            headers["If-None-Match"] = etag
        if last_modified:
            headers["If-Modified-Since"] = last_modified

        target = normalize_feed_url(url)
        logger.debug(f"Fetching feed {target} (etag={etag!r})")
        try:
            response = self.session.get(target, headers=headers, timeout=self.timeout)
        except requests.Timeout as e:
            raise FetchFailedError(f"Timed out after {self.timeout}s fetching {target}") from e
        except requests.RequestException as e:
            raise FetchFailedError(f"Network error: {e}") from e

        if response.status_code == 304:
            return FetchResult(
                status_code=304,
                etag=response.headers.get("ETag") or etag,
                last_modified=response.headers.get("Last-Modified") or last_modified,
            )

        if not 200 <= response.status_code < 300:
            raise FetchFailedError(
                f"HTTP {response.status_code}: {response.reason or 'request failed'}",
                status_code=response.status_code,
            )

        # Feeds often omit the charset; ICS is UTF-8 per RFC 5545
        response.encoding = "utf-8"
        return FetchResult(
            status_code=response.status_code,
            body=response.text,
            etag=response.headers.get("ETag"),
            last_modified=response.headers.get("Last-Modified"),
        )
