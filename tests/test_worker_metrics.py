"""Tests for usage collection and session reporting."""

import httpx
import pytest

from voice_studio.config import Settings
from voice_studio.worker.metrics import UsageCollector, UsageSummary
from voice_studio.worker.reporting import report_session


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestUsageCollector:
    def test_latency_from_user_stop_to_bot_start(self):
        clock = FakeClock()
        collector = UsageCollector(clock=clock)

        clock.now = 101.0
        collector.on_user_stopped_speaking()
        clock.now = 101.8
        collector.on_bot_started_speaking()
        clock.now = 110.0
        collector.on_user_stopped_speaking()
        clock.now = 110.4
        collector.on_bot_started_speaking()

        summary = collector.summary()
        assert summary.avg_latency_ms == pytest.approx(600.0)
        assert summary.total_duration == pytest.approx(10.4)
        assert summary.message_count == 4

    def test_greeting_has_no_latency(self):
        collector = UsageCollector(clock=FakeClock())
        collector.on_bot_started_speaking()

        summary = collector.summary()
        assert summary.agent_turns == 1
        assert summary.avg_latency_ms is None

    def test_usage_totals(self):
        collector = UsageCollector(clock=FakeClock())
        collector.record_llm_tokens(120, 30)
        collector.record_llm_tokens(200, 45)
        collector.record_tts_characters(80)
        collector.record_ttfb("OpenAILLMService#0", 0.4)
        collector.record_ttfb("OpenAILLMService#0", 0.6)

        summary = collector.summary()
        assert summary.llm_prompt_tokens == 320
        assert summary.llm_completion_tokens == 75
        assert summary.tts_characters == 80
        assert summary.avg_ttfb == {"OpenAILLMService#0": pytest.approx(0.5)}

    def test_report_body(self):
        summary = UsageSummary(
            total_duration=12.34567, message_count=3, user_turns=1, agent_turns=2, avg_latency_ms=812.345
        )
        assert summary.to_report() == {"totalDuration": 12.346, "avgLatency": 812.3, "messageCount": 3}


@pytest.fixture
def report_settings():
    return Settings(_env_file=None, worker_api_key="wk", api_base_url="http://studio.test/")


class TestReportSession:
    @pytest.mark.asyncio
    async def test_posts_report(self, report_settings):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={})

        summary = UsageSummary(total_duration=5.0, message_count=2, user_turns=1, agent_turns=1)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            ok = await report_session(report_settings, "sess_1", summary, client=client)

        assert ok is True
        assert str(requests[0].url) == "http://studio.test/v1/sessions/sess_1/end"
        assert requests[0].headers["X-Worker-Key"] == "wk"

    @pytest.mark.asyncio
    async def test_skips_without_session_id(self, report_settings):
        summary = UsageSummary(total_duration=5.0, message_count=0, user_turns=0, agent_turns=0)
        assert await report_session(report_settings, None, summary) is False

    @pytest.mark.asyncio
    async def test_skips_without_worker_key(self):
        settings = Settings(_env_file=None, worker_api_key="")
        summary = UsageSummary(total_duration=5.0, message_count=0, user_turns=0, agent_turns=0)
        assert await report_session(settings, "sess_1", summary) is False

    @pytest.mark.asyncio
    async def test_api_error_is_logged_not_raised(self, report_settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(404, json={"error": "Session not found"}))
        summary = UsageSummary(total_duration=5.0, message_count=0, user_turns=0, agent_turns=0)
        async with httpx.AsyncClient(transport=transport) as client:
            assert await report_session(report_settings, "sess_1", summary, client=client) is False
