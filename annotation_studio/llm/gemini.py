"""
Gemini adapter for the EntityAnnotator capability.

Settings:
  GEMINI_API_KEY    API key (required)
  GEMINI_MODEL      model id (default gemini-2.5-flash)
  MAX_LLM_RETRIES   retries on rate-limit (default 3)

Responses are requested as JSON and returned as raw text; validation happens
downstream in annotation.validation.
"""
from __future__ import annotations

import functools
import logging
import re
import time
from typing import Callable, Optional

from google import genai
from google.genai import errors as genai_errors

from annotation_studio.config import settings
from annotation_studio.llm.prompts import (
    EXTRACTION_PROMPT,
    SUGGESTION_PROMPT,
    build_contents,
)

logger = logging.getLogger(__name__)

# Seconds suggested by the API in a 429 message, e.g. "retry in 18.8s".
_RETRY_DELAY_RE = re.compile(r"retry[^\d]*(\d+(?:\.\d+)?)\s*s", re.IGNORECASE)

JSON_RESPONSE_CONFIG: dict = {"response_mime_type": "application/json", "temperature": 0.0}


@functools.lru_cache(maxsize=4)
def _get_client(api_key: str) -> genai.Client:
    """Return (and cache) the client for *api_key*; it owns an HTTP pool."""
    return genai.Client(api_key=api_key)


def _parse_retry_delay(error: Exception) -> float | None:
    m = _RETRY_DELAY_RE.search(str(error))
    if m:
        return float(m.group(1))
    delay = getattr(error, "retry_delay", None)
    if delay is not None:
        return float(delay)
    return None


def _is_daily_quota(error: Exception) -> bool:
    """Daily quota exhaustion is not worth retrying."""
    return "PerDay" in str(error)


class GeminiAnnotator:
    """EntityAnnotator backed by the Gemini API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: Optional[int] = None,
        client: Optional[genai.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        key = api_key or settings.GEMINI_API_KEY
        if client is None and not key:
            raise ValueError(
                "Missing Gemini API key. Set GEMINI_API_KEY or pass api_key."
            )
        self.model = model or settings.GEMINI_MODEL
        self.max_retries = settings.MAX_LLM_RETRIES if max_retries is None else max_retries
        self._client = client if client is not None else _get_client(key)
        self._sleep = sleep

    def extract_entities(self, text: str) -> str:
        return self._generate(build_contents(EXTRACTION_PROMPT, text))

    def suggest_spans(self, text: str) -> str:
        return self._generate(build_contents(SUGGESTION_PROMPT, text))

    def _generate(self, contents: str) -> str:
        """
        Send *contents* and return the JSON response text.

        On 429 waits for the suggested delay and retries up to
        ``max_retries`` times. Daily quota errors are not retried.

        Raises:
            RuntimeError: Empty response, daily quota, or retries exhausted.
            google.genai.errors.APIError: Any other API failure.
        """
        attempt = 0

        while True:
            try:
                response = self._client.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=JSON_RESPONSE_CONFIG,
                )
                if response.text is None:
                    raise RuntimeError("Gemini returned an empty response.")
                return response.text

            except genai_errors.ClientError as exc:
                if exc.code != 429:
                    raise

                if _is_daily_quota(exc):
                    raise RuntimeError(
                        f"Daily request quota for model {self.model} exhausted: {exc}"
                    ) from exc

                attempt += 1
                if attempt > self.max_retries:
                    raise RuntimeError(
                        f"Rate-limited after {self.max_retries} retries."
                    ) from exc

                delay = _parse_retry_delay(exc) or (2 ** attempt * 5)
                logger.warning(
                    "429 rate-limit, waiting %.0fs (attempt %d/%d)",
                    delay, attempt, self.max_retries,
                )
                self._sleep(delay)
