"""Text-to-speech capability used to narrate feed entries."""

from autovoice.tts.base import SynthesisResult, TTSProvider
from autovoice.tts.providers import HTTPTTSProvider, PlaceholderProvider, get_provider

__all__ = [
    "TTSProvider",
    "SynthesisResult",
    "PlaceholderProvider",
    "HTTPTTSProvider",
    "get_provider",
]
