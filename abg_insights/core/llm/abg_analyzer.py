"""
ABG Analyzer

The language-model collaborator of the analysis orchestrator. Builds the ABG
prompts, calls Gemini and returns raw reply text; parsing the reply is the
caller's job.
"""
from typing import Optional

from abg_insights.config import settings
from abg_insights.core.clinical import assess
from abg_insights.core.measurement import Measurement
from abg_insights.utils import get_logger, AnalysisProviderError
from .gemini_client import GeminiClient
from . import prompts

logger = get_logger(__name__)


class AbgAnalyzer:
    """
    Produces ABG interpretations with Gemini.

    Falls back to a deterministic rule-based reply when Gemini is not
    configured or ``use_mock`` is set.
    """

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        use_mock: Optional[bool] = None,
        stepwise: Optional[bool] = None
    ):
        self.client = client or GeminiClient()
        self.use_mock = settings.use_mock if use_mock is None else use_mock
        self.stepwise = settings.analysis_mode == "stepwise" if stepwise is None else stepwise
        if self.mock_mode:
            logger.warning("AbgAnalyzer running in mock mode")

    @property
    def mock_mode(self) -> bool:
        return self.use_mock or not self.client.is_available

    @property
    def analysis_mode(self) -> str:
        return "stepwise" if self.stepwise else "full"

    async def _generate(self, prompt: str, action: str) -> str:
        try:
            response = await self.client.generate_async(
                prompt, system_instruction=prompts.SYSTEM_INSTRUCTION
            )
        except AnalysisProviderError as e:
            raise AnalysisProviderError(f"Failed to {action}: {e.message}") from e

        if not response.text.strip():
            raise AnalysisProviderError(f"Failed to {action}: No response generated")
        return response.text

    async def perform_full_analysis(self, measurement: Measurement) -> str:
        """
        Analyse a measurement and return the three-section reply.

        In stepwise mode the reply is assembled from three chained calls;
        otherwise a single prompt asks for all three sections.

        Raises:
            AnalysisProviderError: the provider failed or replied with nothing
        """
        if self.mock_mode:
            return prompts.mock_full_analysis(measurement)
        if self.stepwise:
            return await self.perform_stepwise_analysis(measurement)
        return await self._generate(
            prompts.full_analysis_prompt(measurement), "perform full analysis"
        )

    async def interpret(self, measurement: Measurement) -> str:
        if self.mock_mode:
            return f"Rule-based reading: {assess(measurement).summary()}"
        return await self._generate(prompts.interpret_prompt(measurement), "interpret ABG")

    async def suggest_conditions(self, measurement: Measurement, interpretation: str) -> str:
        if self.mock_mode:
            return "Condition suggestions not available in mock mode."
        return await self._generate(
            prompts.conditions_prompt(measurement, interpretation), "suggest conditions"
        )

    async def recommend_treatments(
        self,
        measurement: Measurement,
        interpretation: str,
        conditions: str
    ) -> str:
        if self.mock_mode:
            return "Treatment recommendations not available in mock mode."
        return await self._generate(
            prompts.treatment_prompt(measurement, interpretation, conditions),
            "recommend treatments",
        )

    async def perform_stepwise_analysis(self, measurement: Measurement) -> str:
        """
        Interpret, then suggest conditions from the interpretation, then
        recommend treatment from both; joined under the usual headings.

        A failing step aborts the chain with that step's error.
        """
        interpretation = await self.interpret(measurement)
        conditions = await self.suggest_conditions(measurement, interpretation)
        treatment = await self.recommend_treatments(measurement, interpretation, conditions)
        return prompts.assemble_sections(interpretation, conditions, treatment)
