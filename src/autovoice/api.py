"""FastAPI app serving generated podcast feeds and their audio."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from autovoice.config import get_settings
from autovoice.content import ContentClient
from autovoice.errors import FetchError, ParseError
from autovoice.logging import setup_logging
from autovoice.podcast import AudioNotFound, PodcastGenerator
from autovoice.podcast.feed_writer import media_type
from autovoice.podcast.models import AUDIO_PATH


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fails startup when SERVER_ROOT is missing
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_format=settings.log_json)
    yield


app = FastAPI(
    title="Autovoice",
    description="Automated voices - podcast feeds of narrated articles",
    version="0.1.0",
    lifespan=lifespan,
)

_generator: PodcastGenerator | None = None
_content: ContentClient | None = None


def get_generator() -> PodcastGenerator:
    global _generator
    if _generator is None:
        _generator = PodcastGenerator.from_settings(get_settings())
    return _generator


def get_content_client() -> ContentClient:
    global _content
    if _content is None:
        _content = ContentClient(get_settings().content)
    return _content


def _upstream_error(e: Exception) -> HTTPException:
    if isinstance(e, ParseError):
        return HTTPException(status_code=422, detail=str(e))
    return HTTPException(status_code=502, detail=str(e))


@app.get("/podcast")
async def podcast(rss: str = Query(..., description="Source RSS feed URL")):
    """Generate a podcast feed from an article feed."""
    try:
        xml = await get_generator().generate_feed(rss)
    except (FetchError, ParseError) as e:
        raise _upstream_error(e) from e
    return Response(content=xml, media_type="application/rss+xml")


@app.get(AUDIO_PATH)
def audio_file(request: Request):
    """Serve cached audio for the file id in the request URL."""
    file_id = f"{AUDIO_PATH}?{request.url.query}"
    generator = get_generator()
    result = generator.get_audio(file_id)
    if isinstance(result, AudioNotFound):
        return JSONResponse(status_code=404, content={"error": result.message})
    item = generator.cache.get(file_id)
    return Response(content=result, media_type=media_type(item.format if item else "mp3"))


@app.get("/content/article/{uuid}")
async def content_article(uuid: str):
    """Fetch one article as a content item."""
    try:
        item = await get_content_client().article_as_item(uuid)
    except (FetchError, ParseError) as e:
        raise _upstream_error(e) from e
    return item.model_dump()


@app.get("/content/rss-items")
async def content_rss_items(rss: str = Query(..., description="Source RSS feed URL")):
    """Normalize the entries of a feed into content items."""
    try:
        items = await get_content_client().rss_items(rss)
    except (FetchError, ParseError) as e:
        raise _upstream_error(e) from e
    return [item.model_dump() for item in items]


@app.get("/content/firstft")
async def content_firstft(max_results: int = 1, include_firstft: bool = False):
    """List article uuids mentioned in the latest FirstFT briefings."""
    try:
        uuids = await get_content_client().get_last_few_first_ft_mentioned_uuids(
            max_results, include_first_ft_uuids=include_firstft
        )
    except (FetchError, ParseError) as e:
        raise _upstream_error(e) from e
    return {"uuids": uuids}
