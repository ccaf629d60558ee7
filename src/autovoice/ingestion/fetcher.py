"""Async HTTP fetch primitive for upstream feeds."""

import httpx
import structlog

from autovoice.errors import FetchError

logger = structlog.get_logger(__name__)


class FeedFetcher:
    """Fetches feed text over HTTP."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the fetcher.

        Args:
            client: Optional shared client; a short-lived one is opened per call if None.
            timeout_seconds: HTTP request timeout.
        """
        self.client = client
        self.timeout = timeout_seconds
        self.logger = logger.bind(component="feed_fetcher")

    async def fetch_text(self, url: str) -> str:
        """Fetch a URL and return its body as text.

        Args:
            url: URL to fetch.

        Returns:
            Response body decoded as text.

        Raises:
            FetchError: On transport failure or a non-2xx response.
        """
        self.logger.debug("Fetching", url=url)

        try:
            if self.client is not None:
                response = await self.client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Upstream returned {e.response.status_code} for {url}",
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch {url}: {e}", url=url) from e

        self.logger.debug("Fetched", url=url, chars=len(response.text))
        return response.text
