"""
Unit Tests for the LLM Module

Gemini client behaviour with a stubbed chat model, and the ABG analyzer in
live and mock modes. No test reaches the network.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from abg_insights.core.llm import AbgAnalyzer, GeminiClient, GeminiConfig, GeminiResponse
from abg_insights.core.llm import prompts
from abg_insights.core.parsing import parse_sections
from abg_insights.utils import AnalysisProviderError


def _fake_llm(content="reply", usage=None, error=None) -> AsyncMock:
    llm = AsyncMock()
    if error is not None:
        llm.ainvoke.side_effect = error
    else:
        llm.ainvoke.return_value = SimpleNamespace(
            content=content,
            usage_metadata=usage or {"input_tokens": 12, "output_tokens": 34},
        )
    return llm


@pytest.fixture
def gemini_config() -> GeminiConfig:
    """Config without an API key."""
    return GeminiConfig(api_key=None, model="gemini-2.5-flash", temperature=0.3)


@pytest.mark.asyncio
class TestGeminiClient:
    """Tests for GeminiClient."""

    async def test_unavailable_without_api_key(self, gemini_config):
        client = GeminiClient(gemini_config)

        assert not client.is_available
        with pytest.raises(AnalysisProviderError):
            await client.generate_async("prompt")

    async def test_generate_returns_response(self, gemini_config):
        llm = _fake_llm("## INTERPRETATION\nok")
        client = GeminiClient(gemini_config, llm=llm)

        response = await client.generate_async("prompt", system_instruction="system")

        assert isinstance(response, GeminiResponse)
        assert response.text == "## INTERPRETATION\nok"
        assert response.model == "gemini-2.5-flash"
        assert response.prompt_tokens == 12
        assert response.completion_tokens == 34
        llm.ainvoke.assert_awaited_once_with("system\n\nprompt")

    async def test_list_content_is_flattened(self, gemini_config):
        content = [{"type": "text", "text": "part one "}, "part two", {"type": "image"}]
        client = GeminiClient(gemini_config, llm=_fake_llm(content))

        response = await client.generate_async("prompt")

        assert response.text == "part one part two"

    async def test_cache_hit_skips_provider(self, gemini_config):
        llm = _fake_llm("cached text")
        client = GeminiClient(gemini_config, llm=llm)

        await client.generate_async("pH 7.31\n pCO2 50")
        second = await client.generate_async("pH 7.31 pCO2 50")

        assert second.finish_reason == "CACHED"
        assert second.text == "cached text"
        assert llm.ainvoke.await_count == 1

    async def test_cache_keeps_numbers_exact(self, gemini_config):
        llm = _fake_llm("text")
        client = GeminiClient(gemini_config, llm=llm)

        await client.generate_async("pH 7.31")
        await client.generate_async("pH 7.34")

        assert llm.ainvoke.await_count == 2

    async def test_empty_reply_not_cached(self, gemini_config):
        llm = _fake_llm("")
        client = GeminiClient(gemini_config, llm=llm)

        await client.generate_async("prompt")
        await client.generate_async("prompt")

        assert llm.ainvoke.await_count == 2

    async def test_provider_error_is_wrapped(self, gemini_config):
        client = GeminiClient(gemini_config, llm=_fake_llm(error=TimeoutError("deadline exceeded")))

        with pytest.raises(AnalysisProviderError) as exc_info:
            await client.generate_async("prompt")

        assert exc_info.value.message == "deadline exceeded"
        assert exc_info.value.code == "PROVIDER_ERROR"

    async def test_stats(self, gemini_config):
        client = GeminiClient(gemini_config, llm=_fake_llm())
        await client.generate_async("prompt")

        stats = client.get_stats()

        assert stats["is_available"] is True
        assert stats["request_count"] == 1
        assert stats["cached_entries"] == 1
        assert stats["last_request"] is not None


@pytest.mark.asyncio
class TestAbgAnalyzer:
    """Tests for AbgAnalyzer."""

    async def test_full_analysis_prompt_contains_values(self, gemini_config, normal_measurement):
        llm = _fake_llm("## INTERPRETATION\nA")
        analyzer = AbgAnalyzer(GeminiClient(gemini_config, llm=llm), use_mock=False)

        text = await analyzer.perform_full_analysis(normal_measurement)

        assert text == "## INTERPRETATION\nA"
        sent = llm.ainvoke.await_args.args[0]
        assert "- pH: 7.4" in sent
        assert "## SUGGESTED CONDITIONS" in sent
        assert sent.startswith(prompts.SYSTEM_INSTRUCTION)

    async def test_empty_reply_raises(self, gemini_config, normal_measurement):
        analyzer = AbgAnalyzer(GeminiClient(gemini_config, llm=_fake_llm("   ")), use_mock=False)

        with pytest.raises(AnalysisProviderError) as exc_info:
            await analyzer.perform_full_analysis(normal_measurement)

        assert exc_info.value.message == "Failed to perform full analysis: No response generated"

    async def test_provider_failure_message(self, gemini_config, normal_measurement):
        client = GeminiClient(gemini_config, llm=_fake_llm(error=RuntimeError("quota")))
        analyzer = AbgAnalyzer(client, use_mock=False)

        with pytest.raises(AnalysisProviderError) as exc_info:
            await analyzer.perform_full_analysis(normal_measurement)

        assert exc_info.value.message == "Failed to perform full analysis: quota"

    async def test_mock_mode_without_key(self, gemini_config, acidotic_measurement):
        analyzer = AbgAnalyzer(GeminiClient(gemini_config), use_mock=False)

        assert analyzer.mock_mode
        text = await analyzer.perform_full_analysis(acidotic_measurement)
        sections = parse_sections(text)

        assert sections.is_complete
        assert "Partially compensated metabolic acidosis" in sections.interpretation

    async def test_forced_mock_mode_skips_provider(self, gemini_config, normal_measurement):
        llm = _fake_llm()
        analyzer = AbgAnalyzer(GeminiClient(gemini_config, llm=llm), use_mock=True)

        await analyzer.perform_full_analysis(normal_measurement)

        llm.ainvoke.assert_not_awaited()

    async def test_stepwise_chain(self, gemini_config, normal_measurement):
        llm = _fake_llm("step reply")
        analyzer = AbgAnalyzer(GeminiClient(gemini_config, llm=llm), use_mock=False)

        interpretation = await analyzer.interpret(normal_measurement)
        conditions = await analyzer.suggest_conditions(normal_measurement, interpretation)
        treatment = await analyzer.recommend_treatments(normal_measurement, interpretation, conditions)

        assert treatment == "step reply"
        last_prompt = llm.ainvoke.await_args.args[0]
        assert "Suggested Conditions: step reply" in last_prompt

    async def test_stepwise_failure_names_step(self, gemini_config, normal_measurement):
        client = GeminiClient(gemini_config, llm=_fake_llm(error=RuntimeError("boom")))
        analyzer = AbgAnalyzer(client, use_mock=False)

        with pytest.raises(AnalysisProviderError) as exc_info:
            await analyzer.suggest_conditions(normal_measurement, "interp")

        assert exc_info.value.message == "Failed to suggest conditions: boom"

    async def test_stepwise_mode_assembles_three_sections(self, gemini_config, normal_measurement):
        llm = _fake_llm("### Detail\nstep reply #1")
        analyzer = AbgAnalyzer(GeminiClient(gemini_config, llm=llm), use_mock=False, stepwise=True)

        text = await analyzer.perform_full_analysis(normal_measurement)
        sections = parse_sections(text)

        assert analyzer.analysis_mode == "stepwise"
        assert llm.ainvoke.await_count == 3
        assert sections.is_complete
        assert sections.interpretation == "Detail\nstep reply #1"
        assert sections.treatment == "Detail\nstep reply #1"

    async def test_stepwise_mode_reports_failing_step(self, gemini_config, normal_measurement):
        llm = _fake_llm()
        llm.ainvoke.side_effect = [
            SimpleNamespace(content="interp", usage_metadata={}),
            RuntimeError("boom"),
        ]
        analyzer = AbgAnalyzer(GeminiClient(gemini_config, llm=llm), use_mock=False, stepwise=True)

        with pytest.raises(AnalysisProviderError) as exc_info:
            await analyzer.perform_full_analysis(normal_measurement)

        assert exc_info.value.message == "Failed to suggest conditions: boom"

    async def test_mock_mode_ignores_stepwise(self, gemini_config, normal_measurement):
        analyzer = AbgAnalyzer(GeminiClient(gemini_config), use_mock=True, stepwise=True)

        text = await analyzer.perform_full_analysis(normal_measurement)

        assert parse_sections(text).is_complete
