"""Shared test data and doubles."""

import asyncio

from autovoice.errors import SynthesisError
from autovoice.tts import SynthesisResult, TTSProvider

FIRST_UUID = "dd033082-49e9-11e7-a3f4-c742b9791d43"
THIRD_UUID = "7f4c8a2e-5b1d-4e3a-9c6f-2a8b7d9e0f11"

SAMPLE_RSS = f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>FT Articles</title>
    <link>https://www.ft.com/</link>
    <description>Article summaries</description>
    <item>
      <title>First article</title>
      <description>First summary.</description>
      <guid isPermaLink="false">http://www.ft.com/cms/s/{FIRST_UUID}.html</guid>
      <pubDate>Mon, 05 Jun 2017 10:00:00 GMT</pubDate>
      <author>Jane Doe</author>
    </item>
    <item>
      <title>Video without uuid</title>
      <description>Not an article.</description>
      <guid isPermaLink="false">https://www.ft.com/video/markets-roundup</guid>
      <pubDate>Mon, 05 Jun 2017 11:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Third article</title>
      <description>Third summary.</description>
      <guid isPermaLink="false">http://www.ft.com/content/{THIRD_UUID.upper()}</guid>
      <pubDate>Tue, 06 Jun 2017 09:30:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""


class FakeProvider(TTSProvider):
    """Deterministic provider with optional per-text delays, failures and cancellations."""

    def __init__(
        self,
        delays: dict[str, float] | None = None,
        failures: set[str] | None = None,
        duration: int | None = 42,
        cancelled: set[str] | None = None,
        audio_format: str = "mp3",
    ) -> None:
        super().__init__(default_voice_id="Amy", audio_format=audio_format)
        self.cancelled = cancelled or set()
        self.delays = delays or {}
        self.failures = failures or set()
        self.duration = duration
        self.calls: list[tuple[str, str]] = []

    async def synthesize(self, text: str, voice_id: str) -> SynthesisResult:
        self.calls.append((text, voice_id))
        await asyncio.sleep(self.delays.get(text, 0))
        if text in self.failures:
            raise SynthesisError(f"provider rejected text: {text}")
        if text in self.cancelled:
            raise asyncio.CancelledError()
        return SynthesisResult(
            audio=f"audio:{text}".encode(),
            voice_id=voice_id,
            duration=self.duration,
            format=self.audio_format,
        )
