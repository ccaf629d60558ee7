"""Podcast generation: enrichment pipeline, feed serialization and audio retrieval."""

from autovoice.podcast.feed_writer import build_podcast_rss, playback_url
from autovoice.podcast.models import (
    AudioNotFound,
    EnrichedItem,
    EntryFailure,
    GenerationResult,
    make_file_id,
)
from autovoice.podcast.pipeline import PodcastGenerator, reported_duration

__all__ = [
    "PodcastGenerator",
    "reported_duration",
    "EnrichedItem",
    "EntryFailure",
    "GenerationResult",
    "AudioNotFound",
    "make_file_id",
    "build_podcast_rss",
    "playback_url",
]
