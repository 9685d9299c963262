"""Agent configuration data models."""

from enum import Enum
from typing import Literal

from pydantic import Field, model_validator

from .base import CamelModel
from .providers import Capability, is_supported
from .session import SessionSummary


class TurnDetection(str, Enum):
    """Policy deciding when the user has finished speaking."""

    VAD = "vad"
    STT = "stt"
    REALTIME_LLM = "realtime_llm"
    MANUAL = "manual"
    MULTILINGUAL = "multilingual"


class STTSettings(CamelModel):
    detect_language: bool = False
    enable_diarization: bool = False
    interim_results: bool = True


class TTSSettings(CamelModel):
    speed: float = Field(default=1.0, ge=0.5, le=2.0)
    stability: float = Field(default=0.5, ge=0.0, le=1.0)


class AudioSettings(CamelModel):
    sample_rate: int = Field(default=48000, ge=8000, le=48000)
    channels: Literal[1, 2] = 1
    frame_length: int = Field(default=20, ge=10, le=100)
    noise_filter: bool = True
    echo_cancellation: bool = True


class VADSettings(CamelModel):
    provider: str = "silero"
    threshold: float = Field(default=0.5, ge=0.0, le=1.0)


class RuntimeAgentConfig(CamelModel):
    """The subset of an agent config the worker needs at connect time.

    This is what gets serialized into room metadata.
    """

    instructions: str = ""

    llm_provider: str = "openai"
    llm_model: str = "gpt-4.1-mini"
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=1000, ge=1, le=4000)

    stt_provider: str = "deepgram"
    stt_model: str = "nova-3"
    stt_language: str = "en"
    stt_settings: STTSettings = Field(default_factory=STTSettings)

    tts_provider: str = "elevenlabs"
    tts_model: str = "eleven_turbo_v2_5"
    tts_voice: str = Field(default="rachel", min_length=1)
    tts_settings: TTSSettings = Field(default_factory=TTSSettings)

    turn_detection: TurnDetection = TurnDetection.VAD
    vad_settings: VADSettings = Field(default_factory=VADSettings)
    allow_interruptions: bool = True
    min_interruption_duration: float = Field(default=0.5, ge=0.0, le=5.0)
    resume_false_interruption: bool = True
    false_interruption_timeout: float = Field(default=1.0, ge=0.0, le=10.0)
    preemptive_generation: bool = True
    min_endpointing_delay: float = Field(default=0.5, ge=0.0, le=5.0)
    max_endpointing_delay: float = Field(default=3.0, ge=0.0, le=10.0)
    user_away_timeout: float = Field(default=15.0, ge=1.0, le=300.0)
    session_timeout: int = Field(default=3600, ge=60, le=7200)
    target_latency: int = Field(default=1000, ge=100, le=5000)

    @model_validator(mode="after")
    def _check_capabilities(self):
        pairs = [
            (Capability.LLM, self.llm_provider, self.llm_model),
            (Capability.STT, self.stt_provider, self.stt_model),
            (Capability.TTS, self.tts_provider, self.tts_model),
            (Capability.VAD, self.vad_settings.provider, None),
        ]
        for capability, provider, model in pairs:
            if not is_supported(capability, provider, model):
                label = f"{provider}/{model}" if model else provider
                raise ValueError(f"Unsupported {capability.value} provider/model: {label}")
        if self.min_endpointing_delay > self.max_endpointing_delay:
            raise ValueError("minEndpointingDelay must not exceed maxEndpointingDelay")
        return self


class AgentBase(RuntimeAgentConfig):
    """Fields a user can set on an agent."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    instructions: str = Field(..., min_length=1, max_length=10000)
    audio_settings: AudioSettings = Field(default_factory=AudioSettings)
    max_tool_steps: int = Field(default=3, ge=1, le=10)


class AgentCreate(AgentBase):
    """Request model for creating a new agent."""

    livekit_agent_name: str | None = Field(default=None, max_length=100)


class AgentUpdate(CamelModel):
    """Request model for a partial agent update.

    Bounds are checked again on the merged record.
    """

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    instructions: str | None = Field(default=None, min_length=1, max_length=10000)
    llm_provider: str | None = None
    llm_model: str | None = None
    llm_temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    llm_max_tokens: int | None = Field(default=None, ge=1, le=4000)
    stt_provider: str | None = None
    stt_model: str | None = None
    stt_language: str | None = None
    stt_settings: STTSettings | None = None
    tts_provider: str | None = None
    tts_model: str | None = None
    tts_voice: str | None = Field(default=None, min_length=1)
    tts_settings: TTSSettings | None = None
    audio_settings: AudioSettings | None = None
    turn_detection: TurnDetection | None = None
    vad_settings: VADSettings | None = None
    allow_interruptions: bool | None = None
    min_interruption_duration: float | None = Field(default=None, ge=0.0, le=5.0)
    resume_false_interruption: bool | None = None
    false_interruption_timeout: float | None = Field(default=None, ge=0.0, le=10.0)
    preemptive_generation: bool | None = None
    min_endpointing_delay: float | None = Field(default=None, ge=0.0, le=5.0)
    max_endpointing_delay: float | None = Field(default=None, ge=0.0, le=10.0)
    max_tool_steps: int | None = Field(default=None, ge=1, le=10)
    user_away_timeout: float | None = Field(default=None, ge=1.0, le=300.0)
    session_timeout: int | None = Field(default=None, ge=60, le=7200)
    target_latency: int | None = Field(default=None, ge=100, le=5000)
    livekit_agent_name: str | None = Field(default=None, max_length=100)


class AgentConfig(AgentBase):
    """A stored agent configuration."""

    id: str
    user_id: str
    livekit_agent_name: str
    created_at: str
    updated_at: str

    def snapshot(self) -> RuntimeAgentConfig:
        """Copy of the runtime fields, detached from later edits."""
        fields = set(RuntimeAgentConfig.model_fields)
        return RuntimeAgentConfig.model_validate(self.model_dump(include=fields))


class AgentSummary(CamelModel):
    """Row in the agents table."""

    id: str
    name: str
    description: str | None = None
    llm_provider: str
    llm_model: str
    stt_provider: str
    stt_model: str
    tts_provider: str
    tts_model: str
    target_latency: int
    created_at: str
    updated_at: str
    session_count: int = 0


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class AgentListResponse(CamelModel):
    data: list[AgentSummary]
    pagination: Pagination


class AgentDetail(AgentConfig):
    """An agent with its most recent sessions."""

    recent_sessions: list[SessionSummary] = Field(default_factory=list)


class MessageResponse(CamelModel):
    message: str
