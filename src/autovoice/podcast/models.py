"""Data models for enriched feed items and pipeline results."""

from datetime import datetime
from urllib.parse import urlencode

from pydantic import BaseModel, Field, computed_field

AUDIO_PATH = "/audio_file.mp3"


def make_file_id(duration: int, narrator_id: str, uuid: str, is_human: bool, format: str) -> str:
    """Build the file identifier for a set of enrichment parameters.

    The identifier is the audio path plus an ordered, URL-encoded query
    string. It is embedded in published feed URLs and is the cache key, so
    the key order and value rendering must stay stable.
    """
    query = urlencode(
        [
            ("duration", str(duration)),
            ("narrator-id", narrator_id),
            ("uuid", uuid),
            ("is-human", "true" if is_human else "false"),
            ("format", format),
        ]
    )
    return f"{AUDIO_PATH}?{query}"


class EnrichedItem(BaseModel):
    """A feed entry plus its synthesized audio and derived metadata."""

    rss_url: str = Field(description="Feed the entry came from")
    guid: str = Field(description="Original GUID from the feed")
    title: str = Field(default="", description="Entry title")
    content: str = Field(default="", description="Text the audio was synthesized from")
    pubdate: str = Field(default="", description="Provider-supplied publish date, verbatim")
    published: datetime | None = Field(default=None, description="Parsed publish date if known")
    author: str | None = Field(default=None, description="Entry author if present")
    uuid: str = Field(description="Canonical article identifier")
    voice_id: str = Field(description="Voice requested for synthesis")
    narrator_id: str = Field(description="Voice the provider narrated with")
    duration: int = Field(description="Audio duration in seconds")
    audio: bytes = Field(default=b"", exclude=True, description="Synthesized audio bytes")
    format: str = Field(default="mp3", description="Audio format tag")
    is_human: bool = Field(default=False, description="Whether the narration is human")

    @computed_field
    @property
    def file_id(self) -> str:
        """Deterministic cache key and playback URL suffix."""
        return make_file_id(self.duration, self.narrator_id, self.uuid, self.is_human, self.format)


class EntryFailure(BaseModel):
    """A source entry that was not turned into an enriched item."""

    index: int = Field(description="Position of the entry in the source feed")
    guid: str = Field(description="GUID of the failed entry")
    reason: str = Field(description="Why processing failed")


class GenerationResult(BaseModel):
    """Outcome of one pipeline run, including partial failures."""

    feed_url: str
    xml: str
    items: list[EnrichedItem] = Field(default_factory=list)
    dropped: int = Field(default=0, description="Entries without an extractable identifier")
    failures: list[EntryFailure] = Field(default_factory=list)


class AudioNotFound(BaseModel):
    """Returned by audio retrieval when no item is cached for a file id."""

    file_id: str
    message: str
