"""Feed ingestion: fetching, parsing and article identifier extraction."""

from autovoice.ingestion.fetcher import FeedFetcher
from autovoice.ingestion.rss_parser import FeedEntry, SourceFeed, parse_feed
from autovoice.ingestion.uuid_extractor import extract_uuid

__all__ = ["FeedFetcher", "FeedEntry", "SourceFeed", "parse_feed", "extract_uuid"]
