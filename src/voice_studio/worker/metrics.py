"""Per-session usage and latency accounting."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class UsageSummary:
    """Aggregated metrics for one session."""

    total_duration: float
    message_count: int
    user_turns: int
    agent_turns: int
    avg_latency_ms: float | None = None
    llm_prompt_tokens: int = 0
    llm_completion_tokens: int = 0
    tts_characters: int = 0
    avg_ttfb: dict[str, float] = field(default_factory=dict)

    def to_report(self) -> dict:
        """Body for the end-of-session report."""
        return {
            "totalDuration": round(self.total_duration, 3),
            "avgLatency": round(self.avg_latency_ms, 1) if self.avg_latency_ms is not None else None,
            "messageCount": self.message_count,
        }


class UsageCollector:
    """Collects metrics as the pipeline emits them.

    Latency is measured from the moment the user stops speaking to the first
    audio the agent plays back.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._started_at = clock()
        self._user_stopped_at: float | None = None
        self._latencies: list[float] = []
        self._ttfb: dict[str, list[float]] = {}
        self.user_turns = 0
        self.agent_turns = 0
        self.llm_prompt_tokens = 0
        self.llm_completion_tokens = 0
        self.tts_characters = 0

    def on_user_stopped_speaking(self) -> None:
        self.user_turns += 1
        self._user_stopped_at = self._clock()

    def on_bot_started_speaking(self) -> None:
        self.agent_turns += 1
        if self._user_stopped_at is None:
            return
        latency_ms = (self._clock() - self._user_stopped_at) * 1000
        self._user_stopped_at = None
        self._latencies.append(latency_ms)
        logger.info(f"Turn latency: {latency_ms:.0f}ms")

    def record_ttfb(self, stage: str, seconds: float) -> None:
        self._ttfb.setdefault(stage, []).append(seconds)
        logger.debug(f"TTFB {stage}: {seconds * 1000:.0f}ms")

    def record_llm_tokens(self, prompt_tokens: int, completion_tokens: int) -> None:
        self.llm_prompt_tokens += prompt_tokens
        self.llm_completion_tokens += completion_tokens
        logger.debug(f"LLM usage: {prompt_tokens} prompt, {completion_tokens} completion tokens")

    def record_tts_characters(self, characters: int) -> None:
        self.tts_characters += characters
        logger.debug(f"TTS usage: {characters} characters")

    def summary(self) -> UsageSummary:
        avg_latency = sum(self._latencies) / len(self._latencies) if self._latencies else None
        return UsageSummary(
            total_duration=self._clock() - self._started_at,
            message_count=self.user_turns + self.agent_turns,
            user_turns=self.user_turns,
            agent_turns=self.agent_turns,
            avg_latency_ms=avg_latency,
            llm_prompt_tokens=self.llm_prompt_tokens,
            llm_completion_tokens=self.llm_completion_tokens,
            tts_characters=self.tts_characters,
            avg_ttfb={stage: sum(values) / len(values) for stage, values in self._ttfb.items()},
        )
