"""
LLM Interpretation Module

Gemini transport and the ABG analyzer that the orchestrator delegates to.
The analyzer returns raw text; section parsing happens in core.parsing.
"""
from .gemini_client import GeminiClient, GeminiConfig, GeminiResponse
from .abg_analyzer import AbgAnalyzer

__all__ = [
    "GeminiClient",
    "GeminiConfig",
    "GeminiResponse",
    "AbgAnalyzer",
]
