"""
1.0 Catalog Fetcher Module
Downloads the product sitemap and turns it into a Catalog.

Key features:
- Long timeout for a potentially large sitemap document
- Fixed number of attempts with a fixed delay between them (no backoff growth)
- Each attempt reports an explicit FetchResult; only exhaustion raises
- Session reuse for connection pooling
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from src.errors import FetchError
from src.models import Catalog, FetchResult
from src.sitemap_parser import DEFAULT_LOCALE, SitemapParser

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ProductCatalogMonitor/1.0"
DEFAULT_TIMEOUT = 600  # 10 minutes: the product sitemap is large
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 2.0


class CatalogFetcher:
    """
    2.0 CatalogFetcher Class
    Fetches the product sitemap with a bounded in-cycle retry policy.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        2.1 Initialize the fetcher.

        Args:
            config: Configuration dictionary with keys:
                - sitemap_url: URL of the product sitemap (required)
                - locale: hreflang to keep (default: "en-us")
                - user_agent: Custom user agent string
                - timeout: Request timeout in seconds (default: 600)
                - max_attempts: Attempts per cycle (default: 3)
                - retry_delay: Seconds between attempts (default: 2.0)
            session: Optional pre-built requests.Session
            sleep: Delay function between attempts
        """
        self.sitemap_url = config.get("sitemap_url", "")
        if not self.sitemap_url or not self.sitemap_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid sitemap URL: {self.sitemap_url!r}")

        self.user_agent = config.get("user_agent") or DEFAULT_USER_AGENT
        self.timeout = config.get("timeout", DEFAULT_TIMEOUT)
        self.max_attempts = max(1, int(config.get("max_attempts", DEFAULT_MAX_ATTEMPTS)))
        self.retry_delay = float(config.get("retry_delay", DEFAULT_RETRY_DELAY))

        self.parser = SitemapParser(locale=config.get("locale", DEFAULT_LOCALE))
        self.session = session or self._create_session()
        self._sleep = sleep

        logger.info(
            f"CatalogFetcher initialized: "
            f"url={self.sitemap_url}, "
            f"timeout={self.timeout}s, "
            f"attempts={self.max_attempts}, "
            f"delay={self.retry_delay}s"
        )

    def _create_session(self) -> requests.Session:
        """2.2 Create a requests Session with our default headers."""
        session = requests.Session()
        session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": "application/xml,text/xml;q=0.9,*/*;q=0.8",
        })
        return session

    def fetch_attempt(self, attempt: int = 1) -> FetchResult:
        """
        2.3 Perform one download + parse.

        Never raises: transport, HTTP and parse problems come back as a
        failed FetchResult for the retry loop to inspect.
        """
        logger.info(f"📥 Downloading product sitemap (attempt {attempt}/{self.max_attempts}): {self.sitemap_url}")

        try:
            response = self.session.get(self.sitemap_url, timeout=self.timeout)
        except requests.exceptions.Timeout:
            return FetchResult(ok=False, error=f"Timeout after {self.timeout}s", attempt=attempt)
        except requests.exceptions.RequestException as e:
            return FetchResult(ok=False, error=f"{type(e).__name__}: {e}", attempt=attempt)

        if not 200 <= response.status_code < 300:
            return FetchResult(ok=False, error=f"HTTP status {response.status_code}", attempt=attempt)

        parsed = self.parser.parse_sitemap(response.content, sitemap_url=self.sitemap_url)
        if parsed["type"] == "error":
            return FetchResult(ok=False, error=parsed["error_message"], attempt=attempt)

        catalog = Catalog(parsed["urls"])
        if not catalog:
            logger.warning(
                f"⚠️ Sitemap parsed but contains no {self.parser.locale} product URLs; "
                f"every previously known product will be reported as removed."
            )

        logger.info(
            f"✅ Extracted {len(catalog):,} {self.parser.locale.upper()} product URLs "
            f"({len(response.content):,} bytes)."
        )
        return FetchResult(ok=True, catalog=catalog, attempt=attempt)

    def fetch(self) -> Catalog:
        """
        2.4 Fetch the catalog, retrying failed attempts within this call.

        Returns:
            The fetched Catalog

        Raises:
            FetchError: when every attempt failed (carries the last error)
        """
        result = None
        for attempt in range(1, self.max_attempts + 1):
            result = self.fetch_attempt(attempt)
            if result.ok:
                return result.catalog

            if attempt < self.max_attempts:
                logger.warning(f"Attempt {attempt} failed: {result.error}. Retrying in {self.retry_delay}s...")
                self._sleep(self.retry_delay)

        logger.error(f"All {self.max_attempts} fetch attempts failed: {result.error}")
        raise FetchError(
            f"Failed to fetch {self.sitemap_url} after {self.max_attempts} attempts: {result.error}",
            attempts=self.max_attempts,
        )

    def close(self) -> None:
        self.session.close()
