"""Voice agent pipeline using Pipecat over a LiveKit room."""

import asyncio
import logging

from pipecat.frames.frames import (
    BotStartedSpeakingFrame,
    EndFrame,
    Frame,
    LLMMessagesFrame,
    MetricsFrame,
    UserStoppedSpeakingFrame,
)
from pipecat.metrics.metrics import LLMUsageMetricsData, TTFBMetricsData, TTSUsageMetricsData
from pipecat.pipeline.pipeline import Pipeline
from pipecat.pipeline.runner import PipelineRunner
from pipecat.pipeline.task import PipelineParams, PipelineTask
from pipecat.processors.aggregators.openai_llm_context import OpenAILLMContext
from pipecat.processors.frame_processor import FrameDirection, FrameProcessor
from pipecat.transports.livekit.transport import LiveKitParams, LiveKitTransport

from ..models.agent import RuntimeAgentConfig
from .metrics import UsageCollector
from .providers import ProviderCredentials, build_llm, build_stt, build_tts, build_vad

logger = logging.getLogger(__name__)

GREETING_PROMPT = "Greet the user warmly and offer your assistance."


class MetricsTap(FrameProcessor):
    """Feeds pipeline metrics and speaking events into a UsageCollector."""

    def __init__(self, collector: UsageCollector):
        super().__init__()
        self.collector = collector

    async def process_frame(self, frame: Frame, direction: FrameDirection):
        await super().process_frame(frame, direction)

        if isinstance(frame, MetricsFrame):
            for data in frame.data:
                if isinstance(data, TTFBMetricsData):
                    self.collector.record_ttfb(data.processor, data.value)
                elif isinstance(data, LLMUsageMetricsData):
                    self.collector.record_llm_tokens(
                        data.value.prompt_tokens, data.value.completion_tokens
                    )
                elif isinstance(data, TTSUsageMetricsData):
                    self.collector.record_tts_characters(data.value)
        elif isinstance(frame, UserStoppedSpeakingFrame):
            self.collector.on_user_stopped_speaking()
        elif isinstance(frame, BotStartedSpeakingFrame):
            self.collector.on_bot_started_speaking()

        await self.push_frame(frame, direction)


class VoiceAgent:
    """Real-time voice agent configured from a stored agent config."""

    def __init__(
        self,
        config: RuntimeAgentConfig,
        credentials: ProviderCredentials,
        collector: UsageCollector,
        bot_name: str = "Voice Studio Agent",
    ):
        self.config = config
        self.credentials = credentials
        self.collector = collector
        self.bot_name = bot_name

    async def run(self, url: str, token: str, room_name: str) -> None:
        """
        Join the room and run the pipeline until the participant leaves.

        Args:
            url: LiveKit websocket URL
            token: Access token for the agent participant
            room_name: Room to join
        """
        logger.info(f"Starting voice agent in room {room_name}")
        config = self.config

        transport = LiveKitTransport(
            url=url,
            token=token,
            room_name=room_name,
            params=LiveKitParams(
                audio_in_enabled=True,
                audio_out_enabled=True,
                vad_analyzer=build_vad(config, self.credentials),
            ),
        )

        stt = build_stt(config, self.credentials)
        llm = build_llm(config, self.credentials)
        tts = build_tts(config, self.credentials)

        messages = [{"role": "system", "content": config.instructions}]
        context = OpenAILLMContext(messages=messages)
        context_aggregator = llm.create_context_aggregator(context)

        pipeline = Pipeline(
            [
                transport.input(),
                stt,
                context_aggregator.user(),
                llm,
                tts,
                MetricsTap(self.collector),
                transport.output(),
                context_aggregator.assistant(),
            ]
        )

        task = PipelineTask(
            pipeline,
            params=PipelineParams(
                allow_interruptions=config.allow_interruptions,
                enable_metrics=True,
                enable_usage_metrics=True,
            ),
        )

        @transport.event_handler("on_first_participant_joined")
        async def on_first_participant_joined(transport, participant_id):
            logger.info(f"Participant joined: {participant_id}")
            # One-shot prompt; only the reply is kept in the conversation context.
            await task.queue_frames(
                [LLMMessagesFrame([*messages, {"role": "system", "content": GREETING_PROMPT}])]
            )

        @transport.event_handler("on_participant_disconnected")
        async def on_participant_disconnected(transport, participant_id):
            logger.info(f"Participant left: {participant_id}")
            await task.queue_frame(EndFrame())

        async def end_after_timeout():
            await asyncio.sleep(config.session_timeout)
            logger.info(f"Session timeout ({config.session_timeout}s) reached in {room_name}")
            await task.queue_frame(EndFrame())

        timeout = asyncio.create_task(end_after_timeout())
        runner = PipelineRunner(handle_sigint=False)

        try:
            await runner.run(task)
        except Exception as e:
            logger.error(f"Error running voice agent: {e}")
            raise
        finally:
            timeout.cancel()
            logger.info(f"Voice agent session ended in room {room_name}")
