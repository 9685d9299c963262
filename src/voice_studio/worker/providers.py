"""Provider lookup tables mapping stored provider names to pipecat services.

Each capability has a closed table. Adding a provider means adding one
factory here and its models to ``models/providers.py``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..config import Settings
from ..errors import UnsupportedProviderError
from ..models.agent import RuntimeAgentConfig
from ..models.providers import Capability

logger = logging.getLogger(__name__)

# ElevenLabs voice IDs
ELEVENLABS_VOICES = {
    "rachel": "21m00Tcm4TlvDq8ikWAM",  # Rachel - warm female (default)
    "adam": "pNInz6obpgDQGcFmaJgB",  # Adam - deep male
    "josh": "TxGEqnHWrfWFTfGW9XjX",  # Josh - young male
    "bella": "EXAVITQu4vr4xnSDxMaL",  # Bella - soft female
    "elli": "MF3mGyEYCl7XYWbV9V6O",  # Elli - young female
}

CARTESIA_DEFAULT_VOICE = "a0e99841-438c-4a64-b679-ae501e7d6091"


@dataclass(frozen=True)
class ProviderCredentials:
    """API keys for every provider, built once from settings."""

    deepgram_api_key: str = ""
    openai_api_key: str = ""
    groq_api_key: str = ""
    elevenlabs_api_key: str = ""
    cartesia_api_key: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderCredentials":
        return cls(
            deepgram_api_key=settings.deepgram_api_key,
            openai_api_key=settings.openai_api_key,
            groq_api_key=settings.groq_api_key,
            elevenlabs_api_key=settings.elevenlabs_api_key,
            cartesia_api_key=settings.cartesia_api_key,
        )


Factory = Callable[[RuntimeAgentConfig, ProviderCredentials], Any]


def resolve_voice_id(provider: str, voice: str) -> str:
    """Map a friendly voice name to the provider's voice ID.

    Unknown names are assumed to already be provider voice IDs.
    """
    if provider == "elevenlabs":
        return ELEVENLABS_VOICES.get(voice.lower(), voice)
    if provider == "cartesia" and voice.lower() in ELEVENLABS_VOICES:
        return CARTESIA_DEFAULT_VOICE
    return voice


# Speech-to-Text


def _deepgram_stt(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    from deepgram import LiveOptions
    from pipecat.services.deepgram.stt import DeepgramSTTService

    live_options = LiveOptions(
        model=config.stt_model,
        language=config.stt_language,
        interim_results=config.stt_settings.interim_results,
        diarize=config.stt_settings.enable_diarization,
        smart_format=True,
        punctuate=True,
    )
    if config.stt_settings.detect_language:
        live_options.language = "multi"
    return DeepgramSTTService(api_key=credentials.deepgram_api_key, live_options=live_options)


# Language models


def _openai_llm(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    from pipecat.services.openai.llm import OpenAILLMService

    return OpenAILLMService(
        api_key=credentials.openai_api_key,
        model=config.llm_model,
        params=OpenAILLMService.InputParams(
            temperature=config.llm_temperature,
            max_tokens=config.llm_max_tokens,
        ),
    )


def _groq_llm(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    from pipecat.services.groq.llm import GroqLLMService

    return GroqLLMService(
        api_key=credentials.groq_api_key,
        model=config.llm_model,
        params=GroqLLMService.InputParams(
            temperature=config.llm_temperature,
            max_tokens=config.llm_max_tokens,
        ),
    )


# Text-to-Speech


def _elevenlabs_tts(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    from pipecat.services.elevenlabs.tts import ElevenLabsTTSService

    return ElevenLabsTTSService(
        api_key=credentials.elevenlabs_api_key,
        voice_id=resolve_voice_id("elevenlabs", config.tts_voice),
        model=config.tts_model,
        params=ElevenLabsTTSService.InputParams(
            stability=config.tts_settings.stability,
            speed=config.tts_settings.speed,
        ),
    )


def _cartesia_tts(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    from pipecat.services.cartesia.tts import CartesiaTTSService

    return CartesiaTTSService(
        api_key=credentials.cartesia_api_key,
        voice_id=resolve_voice_id("cartesia", config.tts_voice),
        model=config.tts_model,
    )


# Voice activity detection


def _silero_vad(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    from pipecat.audio.vad.silero import SileroVADAnalyzer
    from pipecat.audio.vad.vad_analyzer import VADParams

    return SileroVADAnalyzer(
        params=VADParams(
            confidence=config.vad_settings.threshold,
            stop_secs=config.min_endpointing_delay,
        )
    )


PROVIDERS: dict[Capability, dict[str, Factory]] = {
    Capability.STT: {"deepgram": _deepgram_stt},
    Capability.LLM: {"openai": _openai_llm, "groq": _groq_llm},
    Capability.TTS: {"elevenlabs": _elevenlabs_tts, "cartesia": _cartesia_tts},
    Capability.VAD: {"silero": _silero_vad},
}


def get_factory(capability: Capability, provider: str) -> Factory:
    """Look up the factory for a provider, or raise UnsupportedProviderError."""
    try:
        return PROVIDERS[capability][provider]
    except KeyError:
        raise UnsupportedProviderError(capability.value, provider) from None


def build_stt(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    logger.info(f"STT: {config.stt_provider}/{config.stt_model} ({config.stt_language})")
    return get_factory(Capability.STT, config.stt_provider)(config, credentials)


def build_llm(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    logger.info(f"LLM: {config.llm_provider}/{config.llm_model}")
    return get_factory(Capability.LLM, config.llm_provider)(config, credentials)


def build_tts(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    logger.info(f"TTS: {config.tts_provider}/{config.tts_model} voice={config.tts_voice}")
    return get_factory(Capability.TTS, config.tts_provider)(config, credentials)


def build_vad(config: RuntimeAgentConfig, credentials: ProviderCredentials):
    return get_factory(Capability.VAD, config.vad_settings.provider)(config, credentials)
