"""
Gemini API Client

Async wrapper around Google Gemini (via LangChain) with a short-lived
response cache. Provider failures are raised as AnalysisProviderError so the
caller decides how to surface them.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple
from enum import Enum
from datetime import datetime
import hashlib

from langchain_google_genai import ChatGoogleGenerativeAI

from abg_insights.config import settings
from abg_insights.utils import get_logger, AnalysisProviderError

logger = get_logger(__name__)


class GeminiModel(str, Enum):
    """Known Gemini model names."""
    FLASH_2_5 = "gemini-2.5-flash"  # Stable standard
    FLASH_2_5_LITE = "gemini-2.5-flash-lite"
    PRO_2_5 = "gemini-2.5-pro"
    FLASH_2_0 = "gemini-2.0-flash"
    FLASH_1_5_LEGACY = "gemini-1.5-flash"  # Retired


@dataclass
class GeminiConfig:
    """Configuration for Gemini client."""
    api_key: Optional[str] = field(default_factory=lambda: settings.gemini_api_key)
    model: str = field(default_factory=lambda: settings.gemini_model)
    temperature: float = field(default_factory=lambda: settings.gemini_temperature)
    max_output_tokens: int = field(default_factory=lambda: settings.gemini_max_output_tokens)
    request_timeout_seconds: int = field(default_factory=lambda: settings.gemini_timeout_seconds)
    max_retries: int = 2

    cache_ttl_seconds: int = 900
    cache_max_entries: int = 500


@dataclass
class GeminiResponse:
    """Structured response from Gemini."""
    text: str
    model: str
    finish_reason: str = "STOP"
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "model": self.model,
            "finish_reason": self.finish_reason,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "latency_ms": round(self.latency_ms, 2),
        }


def _content_text(response: Any) -> str:
    """Flatten a LangChain message's content, which may be a list of parts."""
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content) if content is not None else ""


class GeminiClient:
    """
    Client for Google Gemini API.

    ``is_available`` is False when no API key is configured; callers are
    expected to check it and serve their own offline reply.
    """

    def __init__(self, config: Optional[GeminiConfig] = None, llm: Any = None):
        """
        Args:
            config: Optional configuration, defaults come from settings
            llm: Pre-built chat model, mainly for tests
        """
        self.config = config or GeminiConfig()
        self._llm = llm
        self._request_count = 0
        self._last_request_time: Optional[datetime] = None
        self._cache: Dict[str, Tuple[datetime, str]] = {}

        if self._llm is None:
            self._initialize()

    def _initialize(self):
        if not self.config.api_key:
            logger.warning("No Gemini API key provided - mock mode enabled")
            return

        self._llm = ChatGoogleGenerativeAI(
            model=self._model_name,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_output_tokens,
            timeout=self.config.request_timeout_seconds,
            max_retries=self.config.max_retries,
            google_api_key=self.config.api_key,
        )
        logger.info(f"LangChain Gemini client initialized with model: {self._model_name}")

    @property
    def is_available(self) -> bool:
        return self._llm is not None

    @property
    def _model_name(self) -> str:
        """Resolve model name whether config.model is an enum or a plain string."""
        m = self.config.model
        return m.value if hasattr(m, "value") else str(m)

    async def generate_async(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        use_cache: bool = True
    ) -> GeminiResponse:
        """
        Generate a reply with LangChain's ``ainvoke``.

        Raises:
            AnalysisProviderError: client unavailable, or the provider call failed
        """
        if not self.is_available:
            raise AnalysisProviderError("Gemini client is not configured")

        cache_key = None
        if use_cache:
            cache_key = self._get_cache_key(prompt, system_instruction)
            cached = self._get_from_cache(cache_key)
            if cached is not None:
                logger.info(f"Cache hit for prompt {cache_key[:8]}")
                return GeminiResponse(
                    text=cached,
                    model=f"{self._model_name} (cached)",
                    finish_reason="CACHED",
                    latency_ms=1.0,
                )

        start_time = datetime.now()
        full_prompt = f"{system_instruction}\n\n{prompt}" if system_instruction else prompt
        try:
            response = await self._llm.ainvoke(full_prompt)
        except Exception as e:
            logger.error(f"Gemini generation failed: {e}")
            raise AnalysisProviderError(str(e) or type(e).__name__) from e

        latency = (datetime.now() - start_time).total_seconds() * 1000
        text = _content_text(response)

        prompt_tokens = 0
        completion_tokens = 0
        usage = getattr(response, "usage_metadata", None)
        if usage:
            prompt_tokens = usage.get("input_tokens", 0)
            completion_tokens = usage.get("output_tokens", 0)

        self._request_count += 1
        self._last_request_time = datetime.now()

        # Empty replies are not cached so a retry reaches the provider again
        if cache_key and text.strip():
            self._add_to_cache(cache_key, text)

        return GeminiResponse(
            text=text,
            model=self._model_name,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=latency,
        )

    def _get_cache_key(self, prompt: str, system_instruction: Optional[str]) -> str:
        # Whitespace-only differences share an entry; numbers are kept exact
        normalized = " ".join(prompt.split())
        content = f"{system_instruction or ''}|||{normalized}"
        return hashlib.sha256(content.encode()).hexdigest()

    def _get_from_cache(self, cache_key: str) -> Optional[str]:
        if cache_key in self._cache:
            cached_time, cached_text = self._cache[cache_key]
            age = (datetime.now() - cached_time).total_seconds()
            if age < self.config.cache_ttl_seconds:
                return cached_text
            del self._cache[cache_key]
        return None

    def _add_to_cache(self, cache_key: str, text: str):
        self._cache[cache_key] = (datetime.now(), text)
        if len(self._cache) > self.config.cache_max_entries:
            oldest_key = min(self._cache.keys(), key=lambda k: self._cache[k][0])
            del self._cache[oldest_key]

    def get_stats(self) -> Dict[str, Any]:
        return {
            "is_available": self.is_available,
            "model": self._model_name,
            "request_count": self._request_count,
            "cached_entries": len(self._cache),
            "last_request": self._last_request_time.isoformat() if self._last_request_time else None
        }
