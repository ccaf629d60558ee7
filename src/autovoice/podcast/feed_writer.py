"""Podcast RSS serialization for enriched items.

Builds the output feed with feedgen. Output is deterministic for identical
input: items keep their given order and lastBuildDate comes from the items
themselves rather than the wall clock.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

import structlog
from feedgen.ext.base import BaseEntryExtension, BaseExtension
from feedgen.feed import FeedGenerator

from autovoice.podcast.models import EnrichedItem

logger = structlog.get_logger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

MIME_TYPES = {
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "wav": "audio/wav",
}


class RawPubDateExtension(BaseEntryExtension):
    """Writes a pubDate string as given, for dates no parser understood."""

    def __init__(self) -> None:
        self._pubdate: str | None = None

    def pubdate(self, value: str | None = None) -> str | None:
        if value is not None:
            self._pubdate = value
        return self._pubdate

    def extend_rss(self, entry):
        if self._pubdate:
            element = entry.makeelement("pubDate", {})
            element.text = self._pubdate
            entry.append(element)
        return entry


def media_type(format: str) -> str:
    """MIME type for an audio format tag."""
    return MIME_TYPES.get(format, "audio/mpeg")


def playback_url(server_root: str, file_id: str) -> str:
    """Join the server root and a file identifier into a playback URL."""
    return f"{server_root.rstrip('/')}/{file_id.lstrip('/')}"


def parse_pubdate(value: str) -> datetime | None:
    """Parse an RFC 822 or ISO 8601 date, assuming UTC when no zone is given."""
    if not value:
        return None

    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def build_podcast_rss(
    site_url: str,
    items: Iterable[EnrichedItem | None],
    server_root: str,
    title: str = "Automated Voices",
    description: str = "A Podcast/RSS feed of automated voices",
    build_date: datetime | None = None,
) -> str:
    """Serialize enriched items into a podcast RSS document.

    Args:
        site_url: Site URL of the new feed (the source feed URL).
        items: Items in output order; None entries are skipped.
        server_root: Root that playback URLs are built from.
        title: Feed title.
        description: Feed description.
        build_date: lastBuildDate; defaults to the newest item date.

    Returns:
        RSS XML text.
    """
    fg = FeedGenerator()
    fg.load_extension("podcast")
    fg.title(title)
    fg.description(description)
    fg.link(href=site_url, rel="alternate")
    fg.podcast.itunes_summary(description)
    fg.register_extension("rawdate", BaseExtension, RawPubDateExtension, atom=False, rss=True)

    newest: datetime | None = None

    for item in items:
        if item is None:
            continue

        url = playback_url(server_root, item.file_id)

        fe = fg.add_entry(order="append")
        fe.title(item.title or item.guid or item.uuid)
        fe.link(href=url)
        fe.guid(item.guid, permalink=False)
        fe.enclosure(url, str(len(item.audio)), media_type(item.format))
        fe.podcast.itunes_duration(item.duration)
        if item.author:
            fe.podcast.itunes_author(item.author)

        published = item.published or parse_pubdate(item.pubdate)
        if published is not None:
            fe.pubDate(published)
            if newest is None or published > newest:
                newest = published
        elif item.pubdate:
            logger.warning("Unparseable pubdate, writing verbatim", guid=item.guid, pubdate=item.pubdate)
            fe.rawdate.pubdate(item.pubdate)

    fg.lastBuildDate(build_date or newest or EPOCH)

    return fg.rss_str(pretty=True).decode("utf-8")
