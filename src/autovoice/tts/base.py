"""Abstract base class for text-to-speech providers.

The pipeline only depends on this interface, so real providers and test
doubles are interchangeable.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


class SynthesisResult(BaseModel):
    """Audio produced for one piece of text."""

    audio: bytes = Field(default=b"", description="Synthesized audio, empty when stubbed")
    voice_id: str = Field(description="Voice the provider actually used")
    duration: int | None = Field(default=None, description="Audio duration in seconds if known")
    format: str = Field(default="mp3", description="Audio format tag")


class TTSProvider(ABC):
    """Interface all TTS providers implement."""

    def __init__(self, default_voice_id: str, audio_format: str = "mp3") -> None:
        self.default_voice_id = default_voice_id
        self.audio_format = audio_format

    @abstractmethod
    async def synthesize(self, text: str, voice_id: str) -> SynthesisResult:
        """Convert text to audio.

        Args:
            text: The text to narrate; may be empty.
            voice_id: Voice to synthesize with.

        Returns:
            SynthesisResult with audio bytes and the voice echoed back.

        Raises:
            SynthesisError: If synthesis fails.
        """
