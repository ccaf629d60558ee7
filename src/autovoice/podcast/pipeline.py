"""Feed transformation pipeline.

Fetches a source feed, narrates each entry that refers to an article, caches
the enriched items by file identifier, and re-serializes them as a podcast
feed. Also serves cached audio back by file identifier.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from autovoice.config import Settings
from autovoice.errors import SynthesisError
from autovoice.ingestion.fetcher import FeedFetcher
from autovoice.ingestion.rss_parser import FeedEntry, parse_feed
from autovoice.ingestion.uuid_extractor import extract_uuid
from autovoice.podcast.feed_writer import build_podcast_rss
from autovoice.podcast.models import (
    AudioNotFound,
    EnrichedItem,
    EntryFailure,
    GenerationResult,
)
from autovoice.storage import AudioItemCache
from autovoice.tts import SynthesisResult, TTSProvider, get_provider

logger = structlog.get_logger(__name__)

DurationPolicy = Callable[[SynthesisResult], int]


def reported_duration(fallback: int = 10) -> DurationPolicy:
    """Use the provider-reported duration, or a fixed fallback when it has none."""

    def policy(result: SynthesisResult) -> int:
        return result.duration if result.duration is not None else fallback

    return policy


@dataclass(frozen=True)
class ResolvedEntry:
    """A source entry whose guid yielded an article identifier."""

    index: int
    entry: FeedEntry
    uuid: str


class PodcastGenerator:
    """Turns article feeds into narrated podcast feeds."""

    def __init__(
        self,
        server_root: str,
        provider: TTSProvider,
        cache: AudioItemCache | None = None,
        fetcher: FeedFetcher | None = None,
        duration_policy: DurationPolicy | None = None,
        synthesis_timeout_seconds: float | None = 60.0,
        deadline_seconds: float | None = 300.0,
        feed_title: str = "Automated Voices",
        feed_description: str = "A Podcast/RSS feed of automated voices",
    ) -> None:
        """Initialize the generator.

        Args:
            server_root: Externally reachable root for playback URLs.
            provider: TTS provider used to narrate entries.
            cache: Cache that enriched items are stored in.
            fetcher: Fetcher for the source feed.
            duration_policy: Maps a synthesis result to the item duration.
            synthesis_timeout_seconds: Per-entry synthesis timeout (None disables).
            deadline_seconds: Deadline for all entries of one feed (None disables).
            feed_title: Title of generated feeds.
            feed_description: Description of generated feeds.
        """
        self.server_root = server_root
        self.provider = provider
        self.cache = cache if cache is not None else AudioItemCache()
        self.fetcher = fetcher or FeedFetcher()
        self.duration_policy = duration_policy or reported_duration()
        self.synthesis_timeout = synthesis_timeout_seconds or None
        self.deadline = deadline_seconds or None
        self.feed_title = feed_title
        self.feed_description = feed_description
        self.logger = logger.bind(component="podcast_generator")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PodcastGenerator":
        """Build a generator with its collaborators from settings."""
        return cls(
            server_root=settings.server_root,
            provider=get_provider(settings.tts),
            cache=AudioItemCache(max_items=settings.pipeline.cache_max_items),
            fetcher=FeedFetcher(timeout_seconds=settings.pipeline.fetch_timeout_seconds),
            duration_policy=reported_duration(settings.tts.placeholder_duration),
            synthesis_timeout_seconds=settings.pipeline.synthesis_timeout_seconds,
            deadline_seconds=settings.pipeline.deadline_seconds,
            feed_title=settings.feed.title,
            feed_description=settings.feed.description,
        )

    async def generate_feed(self, feed_url: str, voice_id: str | None = None) -> str:
        """Generate podcast feed XML for a source feed.

        Per-entry failures are logged and the failing entries omitted.

        Raises:
            FetchError: If the source feed cannot be fetched.
            ParseError: If the source feed is not well-formed.
        """
        result = await self.run(feed_url, voice_id=voice_id)
        return result.xml

    async def run(self, feed_url: str, voice_id: str | None = None) -> GenerationResult:
        """Run the pipeline and report items alongside per-entry failures.

        Args:
            feed_url: Source feed URL; also the new feed's site URL.
            voice_id: Voice to narrate with; the provider default if None.

        Returns:
            GenerationResult with the feed XML, enriched items and failures.

        Raises:
            FetchError: If the source feed cannot be fetched.
            ParseError: If the source feed is not well-formed.
        """
        log = self.logger.bind(feed_url=feed_url)
        log.info("Generating podcast feed")

        text = await self.fetcher.fetch_text(feed_url)
        source = parse_feed(text)

        resolved = self.resolve_entries(source.entries)
        voice = voice_id or self.provider.default_voice_id

        tasks = [
            asyncio.create_task(self._enrich(feed_url, entry, voice)) for entry in resolved
        ]
        pending: set[asyncio.Task] = set()
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=self.deadline)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        items: list[EnrichedItem] = []
        failures: list[EntryFailure] = []
        for entry, task in zip(resolved, tasks):
            if task in pending:
                reason = f"deadline of {self.deadline}s exceeded"
            elif task.cancelled():
                reason = "cancelled"
            elif task.exception() is not None:
                reason = str(task.exception()) or type(task.exception()).__name__
            else:
                items.append(task.result())
                continue

            failures.append(EntryFailure(index=entry.index, guid=entry.entry.guid, reason=reason))
            log.error("Entry failed", index=entry.index, guid=entry.entry.guid, reason=reason)

        xml = build_podcast_rss(
            feed_url,
            items,
            self.server_root,
            title=self.feed_title,
            description=self.feed_description,
        )

        log.info(
            "Podcast feed generated",
            source_entries=len(source.entries),
            items=len(items),
            dropped=len(source.entries) - len(resolved),
            failures=len(failures),
        )

        return GenerationResult(
            feed_url=feed_url,
            xml=xml,
            items=items,
            dropped=len(source.entries) - len(resolved),
            failures=failures,
        )

    def resolve_entries(self, entries: list[FeedEntry]) -> list[ResolvedEntry]:
        """Keep the entries whose guid carries an article identifier."""
        resolved = []
        for index, entry in enumerate(entries):
            uuid = extract_uuid(entry.guid)
            if uuid is None:
                self.logger.debug("Dropping entry without uuid", index=index, guid=entry.guid)
                continue
            resolved.append(ResolvedEntry(index=index, entry=entry, uuid=uuid))
        return resolved

    async def _enrich(self, feed_url: str, resolved: ResolvedEntry, voice_id: str) -> EnrichedItem:
        """Narrate one entry, cache the enriched item and return it."""
        entry = resolved.entry
        self.logger.debug("Synthesizing", index=resolved.index, uuid=resolved.uuid, voice_id=voice_id)

        try:
            result = await asyncio.wait_for(
                self.provider.synthesize(entry.description, voice_id),
                timeout=self.synthesis_timeout,
            )
        except TimeoutError as e:
            raise SynthesisError(f"Synthesis timed out after {self.synthesis_timeout}s") from e

        item = EnrichedItem(
            rss_url=feed_url,
            guid=entry.guid,
            title=entry.title,
            content=entry.description,
            pubdate=entry.pubdate,
            published=entry.published,
            author=entry.author,
            uuid=resolved.uuid,
            voice_id=voice_id,
            narrator_id=result.voice_id,
            duration=self.duration_policy(result),
            audio=result.audio,
            format=result.format,
            is_human=False,
        )

        self.cache.put(item)
        return item

    def get_audio(self, file_id: str) -> bytes | AudioNotFound:
        """Return cached audio for a file identifier.

        Returns:
            The audio bytes (possibly empty), or AudioNotFound if nothing is cached.
        """
        item = self.cache.get(file_id)
        if item is None:
            self.logger.info("No cached audio", file_id=file_id)
            return AudioNotFound(file_id=file_id, message=f"no mp3 content for fileId={file_id}")
        return item.audio
