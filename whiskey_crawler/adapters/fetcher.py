"""
Page fetcher for supported product pages.

Retrieves the document text the extractor consumes. The extractor itself
never touches the network; timeouts and host checks live here.
"""
from typing import Optional
from urllib.parse import urlparse

import httpx

from whiskey_crawler.config import config
from whiskey_crawler.exceptions import FetchError, UnsupportedURLError
from whiskey_crawler.models.record import RawPage
from whiskey_crawler.utils.logger import LayerLogger


def is_supported_url(url: str) -> bool:
    """True for http(s) URLs on a configured host or one of its subdomains."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False

    hostname = parsed.hostname.lower()
    return any(
        hostname == host or hostname.endswith("." + host)
        for host in config.get_supported_hosts()
    )


class PageFetcher:
    """
    Fetches product pages with browser-like, Korean-locale headers.

    No retries: a failed fetch is reported once as FetchError.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.transport = transport
        self.logger = LayerLogger("fetcher")

    async def fetch(self, url: str) -> RawPage:
        """
        Fetch a product page.

        Args:
            url: Product page URL on a supported host

        Returns:
            RawPage holding the document text and the requested URL

        Raises:
            UnsupportedURLError: URL is not on a supported host
            FetchError: Network failure or non-success status
        """
        if not is_supported_url(url):
            self.logger.log_decision(
                decision="reject_url",
                reason="host not supported",
                url=url,
            )
            raise UnsupportedURLError(f"Unsupported URL: {url}")

        self.logger.log_action("fetch_page", "started", url=url)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=self._get_headers())
                response.raise_for_status()
                html = response.text

        except httpx.HTTPStatusError as e:
            self.logger.log_fetch(url, e.response.status_code, "http_error")
            raise FetchError(f"Failed to fetch {url}: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            self.logger.log_error(
                f"Failed to fetch URL: {str(e)}",
                error_type="http_error",
                url=url,
            )
            raise FetchError(f"Failed to fetch {url}: {str(e)}") from e

        self.logger.log_fetch(url, response.status_code, "success", content_length=len(html))
        return RawPage(html=html, url=url)

    def _get_headers(self) -> dict:
        """Get request headers mimicking a Korean-locale browser."""
        return {
            "User-Agent": config.USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": config.ACCEPT_LANGUAGE,
        }
