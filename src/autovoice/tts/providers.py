"""Concrete TTS providers and the provider factory."""

import httpx
import structlog

from autovoice.config import TTSSettings
from autovoice.errors import ConfigurationError, SynthesisError
from autovoice.tts.base import SynthesisResult, TTSProvider

logger = structlog.get_logger(__name__)


class PlaceholderProvider(TTSProvider):
    """Stand-in provider that produces no audio.

    Echoes the requested voice and reports a fixed placeholder duration, so
    feeds can be generated end to end before a real provider is wired up.
    """

    def __init__(
        self,
        default_voice_id: str = "Brian",
        audio_format: str = "mp3",
        placeholder_duration: int = 10,
    ) -> None:
        super().__init__(default_voice_id, audio_format)
        self.placeholder_duration = placeholder_duration

    async def synthesize(self, text: str, voice_id: str) -> SynthesisResult:
        logger.debug("Placeholder synthesis", voice_id=voice_id, chars=len(text))
        return SynthesisResult(
            audio=b"",
            voice_id=voice_id,
            duration=self.placeholder_duration,
            format=self.audio_format,
        )


class HTTPTTSProvider(TTSProvider):
    """Provider backed by a JSON-over-HTTP synthesis endpoint."""

    def __init__(
        self,
        endpoint: str,
        default_voice_id: str = "Brian",
        audio_format: str = "mp3",
        api_key: str | None = None,
        timeout_seconds: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HTTP provider.

        Args:
            endpoint: URL that accepts a synthesis request and returns audio bytes.
            default_voice_id: Voice used when callers do not pick one.
            audio_format: Audio format requested from the endpoint.
            api_key: Optional key sent as a bearer token.
            timeout_seconds: HTTP request timeout.
            client: Optional shared client (mainly for tests).
        """
        super().__init__(default_voice_id, audio_format)
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout_seconds
        self.client = client
        self.logger = logger.bind(component="http_tts")

    async def synthesize(self, text: str, voice_id: str) -> SynthesisResult:
        payload = {"text": text, "voiceId": voice_id, "format": self.audio_format}
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

        try:
            if self.client is not None:
                response = await self.client.post(self.endpoint, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.endpoint, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SynthesisError(f"Synthesis request failed: {e}", original_error=e) from e

        self.logger.debug("Synthesized", voice_id=voice_id, bytes=len(response.content))
        return SynthesisResult(
            audio=response.content,
            voice_id=response.headers.get("x-voice-id", voice_id),
            format=self.audio_format,
        )


def get_provider(settings: TTSSettings) -> TTSProvider:
    """Build the provider named in settings.

    Raises:
        ConfigurationError: If the provider is unknown or under-configured.
    """
    if settings.provider == "placeholder":
        return PlaceholderProvider(
            default_voice_id=settings.default_voice_id,
            audio_format=settings.audio_format,
            placeholder_duration=settings.placeholder_duration,
        )

    if settings.provider == "http":
        if not settings.endpoint:
            raise ConfigurationError("TTS_ENDPOINT must be set for the http provider")
        return HTTPTTSProvider(
            endpoint=settings.endpoint,
            default_voice_id=settings.default_voice_id,
            audio_format=settings.audio_format,
            api_key=settings.api_key,
            timeout_seconds=settings.request_timeout_seconds,
        )

    raise ConfigurationError(f"Unknown TTS provider: {settings.provider}")
