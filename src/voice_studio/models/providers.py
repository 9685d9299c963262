"""Supported provider/model catalog per capability class."""

from enum import Enum


class Capability(str, Enum):
    """Pipeline capability classes."""

    STT = "stt"
    LLM = "llm"
    TTS = "tts"
    VAD = "vad"


CATALOG: dict[Capability, dict[str, frozenset[str]]] = {
    Capability.STT: {
        "deepgram": frozenset({"nova-3", "nova-2", "nova-2-general", "nova-2-phonecall"}),
    },
    Capability.LLM: {
        "openai": frozenset({"gpt-4.1-mini", "gpt-4.1", "gpt-4o-mini", "gpt-4o"}),
        "groq": frozenset({"llama-3.1-8b-instant", "llama-3.3-70b-versatile"}),
    },
    Capability.TTS: {
        "elevenlabs": frozenset(
            {"eleven_turbo_v2_5", "eleven_turbo_v2", "eleven_flash_v2_5", "eleven_multilingual_v2"}
        ),
        "cartesia": frozenset({"sonic-2", "sonic-english"}),
    },
    # VAD runs locally; it has no model variants.
    Capability.VAD: {
        "silero": frozenset(),
    },
}


def providers_for(capability: Capability) -> list[str]:
    """Provider names supported for a capability."""
    return sorted(CATALOG[capability])


def is_supported(capability: Capability, provider: str, model: str | None = None) -> bool:
    """Check that a provider (and optionally its model) belongs to a capability."""
    models = CATALOG[capability].get(provider)
    if models is None:
        return False
    if model is None or not models:
        return True
    return model in models
