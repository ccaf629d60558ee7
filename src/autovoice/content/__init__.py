"""Content API client for article lookup and search.

Fetches articles from the enriched content API (CAPI), searches via the
search API (SAPI), and normalizes both articles and feed entries into
ContentItem records sharing the pipeline's identifier extraction.
"""

import asyncio
import json
import re
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from autovoice.config import ContentSettings
from autovoice.errors import ConfigurationError, FetchError, ParseError
from autovoice.ingestion.fetcher import FeedFetcher
from autovoice.ingestion.rss_parser import FeedEntry, parse_feed
from autovoice.ingestion.uuid_extractor import extract_uuid

logger = structlog.get_logger(__name__)

FT_CONTENT_PATTERN = re.compile(
    r'<ft-content\s+type="http://www\.ft\.com/ontology/content/Article"\s+'
    r'url="http://api\.ft\.com/content/([a-f0-9-]+)"'
)

SEARCH_DEFAULTS: dict[str, Any] = {
    "queryString": "",
    "maxResults": 1,
    "offset": 0,
    "aspects": ["title"],
    "constraints": [],
}


class ContentItem(BaseModel):
    """An article or feed entry normalized for narration."""

    content: str = Field(default="", description="Body text or feed description")
    title: str = Field(default="", description="Article title")
    guid: str = Field(default="", description="GUID or web URL")
    pubdate: str = Field(default="", description="Publish date, verbatim")
    author: str | None = Field(default=None, description="Byline or feed author")
    uuid: str | None = Field(default=None, description="Canonical article identifier")
    rss_url: str | None = Field(default=None, description="Source feed, for feed entries")


def build_search_query(params: dict[str, Any]) -> dict[str, Any]:
    """Build a SAPI request body from partial search params.

    When no query string is given, the constraints are and-ed together.
    """
    combined = {**SEARCH_DEFAULTS, **params}

    query_string = combined["queryString"]
    if query_string == "" and combined["constraints"]:
        query_string = " and ".join(combined["constraints"])

    return {
        "queryString": query_string,
        "queryContext": {"curations": ["ARTICLES", "BLOGS"]},
        "resultContext": {
            "maxResults": str(combined["maxResults"]),
            "offset": str(combined["offset"]),
            "aspects": combined["aspects"],
            "sortOrder": "DESC",
            "sortField": "lastPublishDateTime",
        },
    }


def extract_first_ft_ids(sapi_obj: dict[str, Any]) -> list[str]:
    """Pull result ids out of a SAPI response, tolerating empty shapes."""
    results = sapi_obj.get("results")
    if not results:
        logger.debug("No SAPI results")
        return []

    inner = results[0].get("results") if isinstance(results[0], dict) else None
    if not inner:
        logger.debug("No SAPI inner results")
        return []

    return [r["id"] for r in inner if "id" in r]


def entry_to_item(entry: FeedEntry, rss_url: str) -> ContentItem:
    """Normalize a feed entry."""
    return ContentItem(
        content=entry.description,
        title=entry.title,
        guid=entry.guid,
        pubdate=entry.pubdate,
        author=entry.author,
        uuid=extract_uuid(entry.guid),
        rss_url=rss_url,
    )


def article_to_item(article: dict[str, Any]) -> ContentItem:
    """Normalize a CAPI article JSON document."""
    return ContentItem(
        content=article.get("bodyXML", ""),
        title=article.get("title", ""),
        guid=article.get("webUrl", ""),
        pubdate=article.get("publishedDate", ""),
        author=article.get("byline"),
        uuid=extract_uuid(article.get("id")),
    )


class ContentClient:
    """Client for the content and search APIs."""

    def __init__(
        self,
        settings: ContentSettings,
        client: httpx.AsyncClient | None = None,
        fetcher: FeedFetcher | None = None,
    ) -> None:
        """Initialize the content client.

        Args:
            settings: Content API settings; an API key is required.
            client: Optional shared HTTP client.
            fetcher: Fetcher used for RSS sources.

        Raises:
            ConfigurationError: If CAPI_KEY is not configured.
        """
        if not settings.key:
            raise ConfigurationError("CAPI_KEY not specified in env")

        self.api_key = settings.key
        self.content_url = settings.content_url
        self.search_url = settings.search_url
        self.timeout = settings.timeout_seconds
        self.client = client
        self.fetcher = fetcher or FeedFetcher(client=client, timeout_seconds=settings.timeout_seconds)
        self.logger = logger.bind(component="content_client")

    async def search(self, params: dict[str, Any]) -> dict[str, Any]:
        """Run a SAPI search.

        Returns:
            Dict with the original params and the parsed SAPI response.
        """
        query = build_search_query(params)
        self.logger.debug("Searching", query=query)

        response = await self._request(
            "POST", self.search_url, params={"apiKey": self.api_key}, json=query
        )
        return {"params": params, "sapi_obj": self._decode(response)}

    async def search_by_uuid(self, uuid: str) -> dict[str, Any]:
        return await self.search({"queryString": uuid})

    async def search_last_few_first_ft(self, max_results: int) -> dict[str, Any]:
        return await self.search({"queryString": "brand:FirstFT", "maxResults": max_results})

    async def get_last_few_first_ft_mentioned_uuids(
        self, max_results: int, include_first_ft_uuids: bool = False
    ) -> list[str]:
        """Collect the article uuids linked from the latest FirstFT briefings.

        Args:
            max_results: How many FirstFT briefings to scan.
            include_first_ft_uuids: Also return the briefings' own uuids, first.
        """
        search_obj = await self.search_last_few_first_ft(max_results)
        first_ft_uuids = extract_first_ft_ids(search_obj["sapi_obj"])

        articles = await asyncio.gather(*(self.article(uuid) for uuid in first_ft_uuids))
        body_xml = "".join(article.get("bodyXML", "") for article in articles)

        uuids = list(first_ft_uuids) if include_first_ft_uuids else []
        uuids.extend(FT_CONTENT_PATTERN.findall(body_xml))
        return uuids

    async def article(self, uuid: str) -> dict[str, Any]:
        """Fetch one article's enriched content JSON.

        Raises:
            FetchError: If the article cannot be fetched.
            ParseError: If the response is not JSON.
        """
        response = await self._request(
            "GET", f"{self.content_url}{uuid}", params={"apiKey": self.api_key}
        )
        return self._decode(response)

    async def article_as_item(self, uuid: str) -> ContentItem:
        return article_to_item(await self.article(uuid))

    async def articles_as_items(self, uuids: list[str]) -> list[ContentItem]:
        return list(await asyncio.gather(*(self.article_as_item(uuid) for uuid in uuids)))

    async def rss_items(self, rss_url: str) -> list[ContentItem]:
        """Fetch a feed and normalize its entries."""
        text = await self.fetcher.fetch_text(rss_url)
        feed = parse_feed(text)
        return [entry_to_item(entry, rss_url) for entry in feed.entries]

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._send(method, url, **kwargs)
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Content API returned {e.response.status_code} for {url}",
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Content API request to {url} failed: {e}", url=url) from e

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if self.client is not None:
            response = await self.client.request(method, url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise ParseError(f"Content API returned invalid JSON: {e}") from e
