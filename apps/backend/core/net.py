"""
HTTP client for authenticated job page fetches.

One GET per call with a browser-realistic header set, a hard timeout and
redirect following. Failures surface as FetchError; there are no retries at
this level.
"""
import time
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from pipeline.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_UA = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)
DEFAULT_REFERER = "https://www.linkedin.com/"
DEFAULT_TIMEOUT = 15.0
MAX_BODY_KB = 4096


@dataclass(frozen=True)
class FetchResult:
    """A fetched page. `url` is the final URL after redirects."""
    url: str
    status_code: int
    html: str
    elapsed_ms: int = 0


class HTTPClient:
    """HTTP client that looks like a logged-in desktop browser"""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: Optional[str] = None,
        referer: str = DEFAULT_REFERER,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = httpx.Timeout(timeout)
        self.user_agent = user_agent or DEFAULT_UA
        self.referer = referer
        self._transport = transport

    def _get_headers(self, cookie_header: Optional[str] = None) -> Dict[str, str]:
        """Build request headers matching a regular browser navigation"""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": self.referer,
        }
        if cookie_header:
            headers["Cookie"] = cookie_header
        return headers

    async def fetch_page(self, url: str, cookie_header: Optional[str] = None) -> FetchResult:
        """
        Fetch a page once.

        Args:
            url: Page URL
            cookie_header: Serialized session cookies

        Returns:
            FetchResult with the resolved URL, status and decoded body

        Raises:
            FetchError: On timeout, DNS/connection failure, an invalid URL or a non-2xx status
        """
        start_time = time.monotonic()
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(url, headers=self._get_headers(cookie_header))
            except httpx.TimeoutException as e:
                logger.warning(f"[net] Timeout fetching {url}: {e}")
                raise FetchError(f"Timeout fetching page: {e}", url=url) from e
            except httpx.HTTPError as e:
                logger.warning(f"[net] Connection error fetching {url}: {e}")
                raise FetchError(f"Connection error: {e}", url=url) from e
            except (httpx.InvalidURL, ValueError) as e:
                logger.warning(f"[net] Invalid URL {url!r}: {e}")
                raise FetchError(f"Invalid URL: {e}", url=url) from e

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        final_url = str(response.url)
        content_length = len(response.content)
        logger.info(f"[net] GET {response.status_code} {url} -> {final_url} ({content_length} bytes, {elapsed_ms}ms)")

        if not 200 <= response.status_code < 300:
            raise FetchError(
                f"HTTP {response.status_code} from {final_url}",
                url=final_url,
                status_code=response.status_code,
            )

        body = response.content
        if content_length > MAX_BODY_KB * 1024:
            logger.warning(f"[net] Content too large: {content_length} bytes (limit: {MAX_BODY_KB}KB) - {url}")
            body = body[:MAX_BODY_KB * 1024]

        encoding = response.encoding or "utf-8"
        html = body.decode(encoding, errors="ignore")
        return FetchResult(url=final_url, status_code=response.status_code, html=html, elapsed_ms=elapsed_ms)
