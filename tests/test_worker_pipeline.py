"""Tests for the voice agent pipeline wiring."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pipecat.frames.frames import EndFrame, LLMMessagesFrame

from voice_studio.models.agent import RuntimeAgentConfig
from voice_studio.worker import pipeline
from voice_studio.worker.metrics import UsageCollector


async def run_agent():
    """Run VoiceAgent against mocked pipecat pieces; return the task, context and event handlers."""
    handlers = {}

    def event_handler(name):
        def register(fn):
            handlers[name] = fn
            return fn

        return register

    transport = MagicMock()
    transport.event_handler.side_effect = event_handler
    task = MagicMock()
    task.queue_frames = AsyncMock()
    task.queue_frame = AsyncMock()
    runner = MagicMock()
    runner.run = AsyncMock()

    agent = pipeline.VoiceAgent(
        RuntimeAgentConfig(instructions="You help hotel guests."), MagicMock(), UsageCollector()
    )
    with patch.object(pipeline, "LiveKitTransport", return_value=transport), patch.object(
        pipeline, "build_vad"
    ), patch.object(pipeline, "build_stt"), patch.object(pipeline, "build_llm"), patch.object(
        pipeline, "build_tts"
    ), patch.object(pipeline, "LiveKitParams"), patch.object(pipeline, "Pipeline"), patch.object(
        pipeline, "PipelineTask", return_value=task
    ), patch.object(pipeline, "PipelineRunner", return_value=runner), patch.object(
        pipeline, "OpenAILLMContext"
    ) as context_cls:
        await agent.run("wss://test.livekit.cloud", "jwt", "agent-a1-u1")

    runner.run.assert_awaited_once_with(task)
    return task, context_cls.call_args.kwargs["messages"], handlers


@pytest.mark.asyncio
async def test_greeting_is_one_shot():
    task, messages, handlers = await run_agent()

    await handlers["on_first_participant_joined"](MagicMock(), "user-u1")

    frame = task.queue_frames.await_args.args[0][0]
    assert isinstance(frame, LLMMessagesFrame)
    assert frame.messages[0] == {"role": "system", "content": "You help hotel guests."}
    assert frame.messages[-1] == {"role": "system", "content": pipeline.GREETING_PROMPT}
    assert messages == [{"role": "system", "content": "You help hotel guests."}]


@pytest.mark.asyncio
async def test_participant_leaving_ends_pipeline():
    task, _, handlers = await run_agent()

    await handlers["on_participant_disconnected"](MagicMock(), "user-u1")

    assert isinstance(task.queue_frame.await_args.args[0], EndFrame)
