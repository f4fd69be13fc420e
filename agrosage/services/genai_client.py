"""
AgroSage — Generative AI Client
────────────────────────────────
Thin async wrapper around google-generativeai. Every flow talks to the model
through `GenAIClient.generate()`, which always asks for a JSON response.

Enable with:
    export GEMINI_API_KEY=your_key_here
"""

import logging
from functools import lru_cache
from typing import Any, List, Optional, Union

import google.generativeai as genai

from agrosage import config

logger = logging.getLogger("agrosage.genai")

Part = Union[str, dict]


class GenAIServiceError(RuntimeError):
    """Raised when the generative AI service cannot produce a response."""


class MissingAPIKeyError(GenAIServiceError):
    """Raised when GEMINI_API_KEY is not configured."""


class RateLimitExceededError(GenAIServiceError):
    """Raised when the model reports a rate/usage limit issue."""


class GenAIClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = config.GENAI_MODEL,
        temperature: float = config.GENAI_TEMPERATURE,
        max_output_tokens: int = config.GENAI_MAX_OUTPUT_TOKENS,
    ):
        self.api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self.model_name = model_name
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._model: Optional[genai.GenerativeModel] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_model(self) -> genai.GenerativeModel:
        if self._model is None:
            if not self.api_key:
                raise MissingAPIKeyError(
                    "GEMINI_API_KEY is not configured. Set it in your environment."
                )
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                self.model_name,
                generation_config={
                    "temperature": self.temperature,
                    "max_output_tokens": self.max_output_tokens,
                    "response_mime_type": "application/json",
                },
            )
            logger.info("Generative model ready: %s", self.model_name)
        return self._model

    async def generate(self, parts: List[Part]) -> str:
        """Send prompt parts (text and inline media) and return the raw response text."""
        model = self._get_model()
        try:
            response = await model.generate_content_async(parts)
            text = response.text
        except Exception as exc:  # SDK raises a mix of google.api_core and ValueError types
            message = str(exc)
            if "429" in message or "rate limit" in message.lower() or "quota" in message.lower():
                raise RateLimitExceededError(
                    "Generative AI rate limit reached. Please try again shortly."
                ) from exc
            logger.error("Generative AI call failed: %s", message)
            raise GenAIServiceError("The AI service is temporarily unavailable.") from exc
        return (text or "").strip()


@lru_cache(maxsize=1)
def get_genai_client() -> GenAIClient:
    """FastAPI dependency; tests override it with a fake client."""
    return GenAIClient()


def describe(client: Any) -> dict:
    return {
        "model": getattr(client, "model_name", "unknown"),
        "configured": bool(getattr(client, "configured", False)),
    }
