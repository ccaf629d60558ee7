"""Tests for the content API client."""

import json
from unittest.mock import patch

import httpx
import pytest
from tenacity import wait_none

from autovoice.config import ContentSettings
from autovoice.content import (
    ContentClient,
    article_to_item,
    build_search_query,
    extract_first_ft_ids,
)
from autovoice.errors import ConfigurationError, FetchError, ParseError
from helpers import FIRST_UUID, THIRD_UUID

SETTINGS = ContentSettings(
    key="test-key",
    content_url="http://api.example.com/enrichedcontent/",
    search_url="http://api.example.com/content/search/v1",
)

BRIEFING_UUID = "11111111-2222-3333-4444-555555555555"

BRIEFING_BODY = (
    "<body><p>Deals were "
    '<ft-content type="http://www.ft.com/ontology/content/Article" '
    f'url="http://api.ft.com/content/{FIRST_UUID}" title="www.ft.com">paid up to $1bn</ft-content>'
    " and markets "
    '<ft-content type="http://www.ft.com/ontology/content/Article" '
    f'url="http://api.ft.com/content/{THIRD_UUID}">rallied</ft-content>'
    "</p></body>"
)


def _client(handler) -> ContentClient:
    return ContentClient(SETTINGS, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestBuildSearchQuery:
    def test_defaults(self):
        query = build_search_query({"queryString": "brand:FirstFT"})

        assert query["queryString"] == "brand:FirstFT"
        assert query["queryContext"] == {"curations": ["ARTICLES", "BLOGS"]}
        assert query["resultContext"] == {
            "maxResults": "1",
            "offset": "0",
            "aspects": ["title"],
            "sortOrder": "DESC",
            "sortField": "lastPublishDateTime",
        }

    def test_constraints_joined_when_no_query_string(self):
        query = build_search_query({"constraints": ["a:b", "c:d"], "maxResults": 5})

        assert query["queryString"] == "a:b and c:d"
        assert query["resultContext"]["maxResults"] == "5"


class TestExtractFirstFtIds:
    def test_extracts_ids(self):
        sapi = {"results": [{"results": [{"id": "a"}, {"id": "b"}]}]}
        assert extract_first_ft_ids(sapi) == ["a", "b"]

    @pytest.mark.parametrize(
        "sapi",
        [{}, {"results": []}, {"results": [{}]}, {"results": [{"results": []}]}],
    )
    def test_empty_shapes(self, sapi):
        assert extract_first_ft_ids(sapi) == []


class TestArticleToItem:
    def test_maps_fields(self):
        item = article_to_item(
            {
                "id": f"http://www.ft.com/thing/{FIRST_UUID}",
                "title": "Headline",
                "bodyXML": "<body>Text</body>",
                "webUrl": f"https://www.ft.com/content/{FIRST_UUID}",
                "publishedDate": "2017-06-05T10:00:00.000Z",
                "byline": "Jane Doe in London",
            }
        )

        assert item.uuid == FIRST_UUID
        assert item.content == "<body>Text</body>"
        assert item.guid.endswith(FIRST_UUID)
        assert item.author == "Jane Doe in London"
        assert item.rss_url is None


class TestContentClient:
    def test_requires_api_key(self):
        with pytest.raises(ConfigurationError, match="CAPI_KEY"):
            ContentClient(ContentSettings(key=None))

    @pytest.mark.asyncio
    async def test_article_sends_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            return httpx.Response(200, json={"id": FIRST_UUID, "title": "Headline"})

        article = await _client(handler).article(FIRST_UUID)

        assert article["title"] == "Headline"
        assert seen["url"].path == f"/enrichedcontent/{FIRST_UUID}"
        assert seen["url"].params["apiKey"] == "test-key"

    @pytest.mark.asyncio
    async def test_article_not_found_raises_fetch_error(self):
        client = _client(lambda request: httpx.Response(404))

        with pytest.raises(FetchError) as exc_info:
            await client.article(FIRST_UUID)

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_json_raises_parse_error(self):
        client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(ParseError):
            await client.article(FIRST_UUID)

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200, json={"id": FIRST_UUID})

        with patch.object(ContentClient._send.retry, "wait", wait_none()):
            article = await _client(handler).article(FIRST_UUID)

        assert len(attempts) == 3
        assert article["id"] == FIRST_UUID

    @pytest.mark.asyncio
    async def test_search_posts_query(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"results": []})

        result = await _client(handler).search_by_uuid(FIRST_UUID)

        assert seen["method"] == "POST"
        assert seen["body"]["queryString"] == FIRST_UUID
        assert result == {"params": {"queryString": FIRST_UUID}, "sapi_obj": {"results": []}}

    @pytest.mark.asyncio
    async def test_first_ft_mentioned_uuids(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                body = json.loads(request.content)
                assert body["queryString"] == "brand:FirstFT"
                assert body["resultContext"]["maxResults"] == "2"
                return httpx.Response(
                    200, json={"results": [{"results": [{"id": BRIEFING_UUID}]}]}
                )
            return httpx.Response(200, json={"id": BRIEFING_UUID, "bodyXML": BRIEFING_BODY})

        client = _client(handler)

        mentioned = await client.get_last_few_first_ft_mentioned_uuids(2)
        with_briefings = await client.get_last_few_first_ft_mentioned_uuids(
            2, include_first_ft_uuids=True
        )

        assert mentioned == [FIRST_UUID, THIRD_UUID]
        assert with_briefings == [BRIEFING_UUID, FIRST_UUID, THIRD_UUID]

    @pytest.mark.asyncio
    async def test_articles_as_items_keeps_order(self):
        def handler(request: httpx.Request) -> httpx.Response:
            uuid = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={"id": uuid, "title": f"Title {uuid}"})

        items = await _client(handler).articles_as_items([THIRD_UUID, FIRST_UUID])

        assert [item.uuid for item in items] == [THIRD_UUID, FIRST_UUID]

    @pytest.mark.asyncio
    async def test_rss_items(self, sample_rss):
        client = _client(lambda request: httpx.Response(200, text=sample_rss))

        items = await client.rss_items("https://example.com/rss")

        assert [item.uuid for item in items] == [FIRST_UUID, None, THIRD_UUID]
        assert all(item.rss_url == "https://example.com/rss" for item in items)
        assert "Jane Doe" in items[0].author
