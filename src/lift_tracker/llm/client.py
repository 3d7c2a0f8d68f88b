"""
Gemini API client.

Thin wrapper over the generateContent REST endpoint with retry on rate
limits, server errors and timeouts.
"""

import time
from typing import Any, Callable

import requests

BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.0-flash"

MAX_RETRIES = 3
RETRY_BACKOFF = 2  # exponential backoff multiplier


class LLMError(Exception):
    """Raised when text generation fails or returns something unusable."""

    pass


class GeminiClient:
    """
    Generate text with a Gemini model.

    Args:
        api_key: Gemini API key
        model: Model name, e.g. "gemini-2.0-flash"
        timeout: Per-request timeout in seconds
        max_retries: Attempts before giving up on 429/5xx/timeouts
        on_retry: Called with a short message before each retry sleep
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        max_retries: int = MAX_RETRIES,
        on_retry: Callable[[str], None] | None = None,
    ):
        if not api_key:
            raise LLMError(
                "API key is not set. Set GEMINI_API_KEY or llm.api_key in settings.yaml."
            )
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.on_retry = on_retry
        self._sleep = time.sleep

    @property
    def url(self) -> str:
        return f"{BASE_URL}/{self.model}:generateContent"

    def _retry(self, reason: str, attempt: int) -> None:
        wait = RETRY_BACKOFF ** attempt
        if self.on_retry is not None:
            self.on_retry(f"{reason}, retrying in {wait}s (attempt {attempt}/{self.max_retries})")
        self._sleep(wait)

    def _post(self, body: dict[str, Any]) -> dict[str, Any]:
        """POST with retry.  Returns the decoded JSON response."""
        for attempt in range(1, self.max_retries + 1):
            try:
                r = requests.post(
                    self.url,
                    params={"key": self.api_key},
                    headers={"Content-Type": "application/json"},
                    json=body,
                    timeout=self.timeout,
                )
            except requests.exceptions.Timeout as e:
                if attempt < self.max_retries:
                    self._retry("Gemini timeout", attempt)
                    continue
                raise LLMError(f"Gemini request timed out after {self.max_retries} attempts") from e
            except requests.exceptions.RequestException as e:
                raise LLMError(f"Gemini request failed: {e}") from e

            if r.status_code == 429 or r.status_code >= 500:
                if attempt < self.max_retries:
                    self._retry(f"Gemini {r.status_code}", attempt)
                    continue

            if not r.ok:
                raise LLMError(_error_message(r))

            try:
                return r.json()
            except ValueError as e:
                raise LLMError(f"Gemini returned invalid JSON: {e}") from e

        raise LLMError(f"Gemini API failed after {self.max_retries} attempts")

    def generate(self, prompt: str, max_tokens: int = 2048, temperature: float = 0.7) -> str:
        """
        Generate a completion for a single-turn prompt.

        Raises:
            LLMError: On HTTP failure or an empty response
        """
        data = self._post(
            {
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": temperature,
                    "maxOutputTokens": max_tokens,
                },
            }
        )

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None

        if not text:
            raise LLMError("Gemini returned an empty response")
        return text


def _error_message(r: requests.Response) -> str:
    try:
        message = r.json().get("error", {}).get("message")
    except (ValueError, AttributeError):
        message = None
    return message or f"API Error: {r.status_code}"
