"""
Delay Classifiers

Decide whether a free-text delay reason is weather-related.

- KeywordDelayClassifier: deterministic vocabulary match
- LLMDelayClassifier: OpenAI-compatible chat model, retried with backoff
- FallbackDelayClassifier: primary strategy with transparent fallback
"""

import json
import logging
import re
from typing import Optional, Sequence

import openai
from pydantic import ValidationError

from core.config.model_config import ModelConfig
from core.retry import RetryPolicy, is_http_retryable, is_network_error, retry_with_backoff

from .models import DelayClassification
from .protocols import ClassifierResponseError, DelayClassifierProtocol

logger = logging.getLogger(__name__)

WEATHER_KEYWORDS = (
    "fog",
    "mist",
    "visibility",
    "storm",
    "thunderstorm",
    "hurricane",
    "typhoon",
    "cyclone",
    "wind",
    "gale",
    "breeze",
    "wave",
    "swell",
    "sea state",
    "rain",
    "precipitation",
    "downpour",
    "snow",
    "ice",
    "freeze",
    "weather",
    "meteorological",
    "atmospheric",
)

SYSTEM_INSTRUCTIONS = """You are a shipping delay classifier. Analyze delay reasons and determine if they are weather-related.

Weather-related factors include:
- Meteorological conditions (fog, mist, visibility)
- Storms (thunderstorm, hurricane, typhoon, cyclone)
- Wind conditions (strong winds, gale, breeze)
- Sea conditions (high waves, rough seas, sea state)
- Precipitation (rain, snow, ice, freeze, downpour)
- Any atmospheric or weather-related events

Respond ONLY with a valid JSON object in this exact format:
{
  "isWeatherRelated": true or false,
  "reasoning": "Brief explanation of your decision",
  "confidence": 0.0 to 1.0 (your confidence in the decision)
}"""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class KeywordDelayClassifier:
    """Case-insensitive substring match against a weather vocabulary"""

    def __init__(
        self,
        keywords: Sequence[str] = WEATHER_KEYWORDS,
        matched_confidence: float = 0.7,
        unmatched_confidence: float = 0.9,
    ):
        self.keywords = tuple(k.lower() for k in keywords)
        self.matched_confidence = matched_confidence
        self.unmatched_confidence = unmatched_confidence

    async def classify(self, reason: str) -> DelayClassification:
        lowered = reason.lower()
        matched = [k for k in self.keywords if k in lowered]
        if matched:
            return DelayClassification(
                is_weather_related=True,
                reasoning=f"Matched weather keywords: {', '.join(matched)}",
                confidence=self.matched_confidence,
            )
        return DelayClassification(
            is_weather_related=False,
            reasoning="No weather keywords found",
            confidence=self.unmatched_confidence,
        )


def parse_classification(output_text: Optional[str]) -> DelayClassification:
    """
    Extract and validate the JSON verdict from a model reply.

    Raises:
        ClassifierResponseError: No JSON object, malformed JSON, or wrong shape
    """
    match = _JSON_OBJECT.search(output_text or "")
    if not match:
        raise ClassifierResponseError("No JSON found in classifier response", raw_output=output_text)
    try:
        return DelayClassification.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ClassifierResponseError(f"Failed to parse classifier response: {e}", raw_output=output_text) from e


def is_retryable_classifier_error(error: BaseException) -> bool:
    """Network failures, rate limits and server errors are worth another try"""
    if isinstance(error, openai.APIConnectionError):
        return True
    if isinstance(error, openai.APIStatusError):
        return is_http_retryable(error.status_code)
    if isinstance(error, ClassifierResponseError):
        return False
    return is_network_error(error)


class LLMDelayClassifier:
    """
    Classifier backed by an OpenAI-compatible chat completion endpoint.

    Raises on failure; pair with FallbackDelayClassifier for graceful degradation.
    """

    def __init__(self, client, model_config: ModelConfig, retry_policy: RetryPolicy, sleep=None):
        self.client = client
        self.model_config = model_config
        self.retry_policy = retry_policy
        self._sleep = sleep

    async def classify(self, reason: str) -> DelayClassification:
        kwargs = {"sleep": self._sleep} if self._sleep else {}
        return await retry_with_backoff(
            lambda: self._call_model(reason),
            self.retry_policy,
            is_retryable_classifier_error,
            **kwargs,
        )

    async def _call_model(self, reason: str) -> DelayClassification:
        response = await self.client.chat.completions.create(
            model=self.model_config.model,
            messages=[
                {"role": "system", "content": SYSTEM_INSTRUCTIONS},
                {"role": "user", "content": reason},
            ],
            max_tokens=self.model_config.max_tokens,
            temperature=self.model_config.temperature,
        )
        content = response.choices[0].message.content
        return parse_classification(content)

    async def close(self):
        await self.client.close()


class FallbackDelayClassifier:
    """Delegates to ``primary``; any failure is answered by ``fallback`` instead"""

    def __init__(self, primary: DelayClassifierProtocol, fallback: DelayClassifierProtocol):
        self.primary = primary
        self.fallback = fallback

    async def classify(self, reason: str) -> DelayClassification:
        try:
            return await self.primary.classify(reason)
        except Exception as e:
            logger.error(f"Delay classification failed, using fallback: {e}")
            return await self.fallback.classify(reason)

    async def close(self):
        for strategy in (self.primary, self.fallback):
            closer = getattr(strategy, "close", None)
            if closer:
                await closer()


__all__ = [
    "WEATHER_KEYWORDS",
    "SYSTEM_INSTRUCTIONS",
    "KeywordDelayClassifier",
    "LLMDelayClassifier",
    "FallbackDelayClassifier",
    "parse_classification",
    "is_retryable_classifier_error",
]
