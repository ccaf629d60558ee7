"""RSS feed parser for article summary feeds.

Parses feed text into an ordered list of entries carrying the fields the
podcast pipeline needs: guid, title, description, publish date and author.
"""

from datetime import UTC, datetime
from typing import Any
from xml.sax import SAXParseException

import feedparser
import structlog
from pydantic import BaseModel, Field

from autovoice.errors import ParseError

logger = structlog.get_logger(__name__)


class FeedEntry(BaseModel):
    """A single entry from the source feed."""

    guid: str = Field(default="", description="Original GUID from the feed")
    title: str = Field(default="", description="Entry title")
    description: str = Field(default="", description="Entry description, used as TTS text")
    pubdate: str = Field(default="", description="Provider-supplied publish date, verbatim")
    published: datetime | None = Field(default=None, description="Publish date as parsed by feedparser")
    author: str | None = Field(default=None, description="Entry author if present")


class SourceFeed(BaseModel):
    """A parsed source feed with entries in document order."""

    title: str = Field(default="", description="Channel title")
    link: str = Field(default="", description="Channel link")
    entries: list[FeedEntry] = Field(default_factory=list, description="Entries in source order")


def parse_feed(text: str) -> SourceFeed:
    """Parse raw feed text.

    Args:
        text: Feed document (RSS or Atom XML).

    Returns:
        SourceFeed: Channel metadata and entries in source order.

    Raises:
        ParseError: If the text is not well-formed feed content.
    """
    # Bytes keep feedparser from treating URL-like text as something to fetch.
    parsed = feedparser.parse(
        text.encode("utf-8"),
        response_headers={"content-type": "application/xml; charset=utf-8"},
    )

    if not parsed.entries and (parsed.bozo or not parsed.version):
        reason = parsed.get("bozo_exception") or "no feed version detected"
        raise ParseError(f"Failed to parse feed: {reason}")

    # Truncated or malformed XML still yields partial entries; reject it.
    if isinstance(parsed.get("bozo_exception"), SAXParseException):
        raise ParseError(f"Feed is not well-formed XML: {parsed.bozo_exception}")

    if parsed.bozo:
        logger.warning(
            "Feed parsed with errors",
            error=str(parsed.get("bozo_exception")),
            entries=len(parsed.entries),
        )

    channel = parsed.feed
    feed = SourceFeed(
        title=channel.get("title", ""),
        link=channel.get("link", ""),
        entries=[_parse_entry(entry) for entry in parsed.entries],
    )

    logger.debug("Parsed feed", title=feed.title, entry_count=len(feed.entries))
    return feed


def _parse_entry(entry: dict[str, Any]) -> FeedEntry:
    """Map a feedparser entry onto a FeedEntry."""
    return FeedEntry(
        guid=entry.get("id") or entry.get("guid") or "",
        title=entry.get("title", ""),
        description=entry.get("description") or entry.get("summary") or "",
        pubdate=entry.get("published", ""),
        published=_to_datetime(entry.get("published_parsed")),
        author=entry.get("author") or None,
    )


def _to_datetime(value: Any) -> datetime | None:
    """Convert feedparser's UTC struct_time into an aware datetime."""
    if value is None:
        return None
    return datetime(*value[:6], tzinfo=UTC)
