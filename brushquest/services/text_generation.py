"""
Gemini text-generation client.

Wraps the generateContent REST endpoint. Rate-limit (429) responses are
retried with exponential backoff and jitter; every other failure is raised
as ProviderError straight away. Malformed JSON in an otherwise successful
reply is never retried - the caller's request fails outright.
"""

import asyncio
import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import requests

from .errors import ProviderError
from .validation_service import extract_json

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class RateLimitError(Exception):
    """Raised internally when Gemini answers 429"""

    def __init__(self, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__("Rate limit hit for gemini")


class GeminiTextClient:
    """Prompt in, text out"""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        max_retries: int = 5,
        base_backoff: float = 1.5,
        min_interval: float = 1.5,
        temperature: float = 0.9,
        max_output_tokens: int = 8192,
        app_logger=None
    ):
        self.api_key = api_key
        self.model = model
        self.max_retries = max_retries
        self.base_backoff = base_backoff
        self.min_interval = min_interval
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.app_logger = app_logger
        self.session = requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=3)
        self._throttle_lock = threading.Lock()
        self._last_call = 0.0

    async def _run_async(self, func, *args, **kwargs):
        """Run a sync function in the thread pool."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            self._executor,
            lambda: func(*args, **kwargs)
        )

    def _throttle(self):
        """Keep at least min_interval seconds between outbound calls"""
        with self._throttle_lock:
            wait = self.min_interval - (time.monotonic() - self._last_call)
            if wait > 0:
                time.sleep(wait)
            self._last_call = time.monotonic()

    def _backoff(self, attempt: int, retry_after: Optional[float]) -> float:
        if retry_after:
            return retry_after
        backoff = (2 ** attempt) * self.base_backoff
        return backoff + random.uniform(0, backoff * 0.25)

    def _post_sync(self, body: dict) -> dict:
        url = f"{GEMINI_API_BASE}/{self.model}:generateContent?key={self.api_key}"
        self._throttle()

        try:
            response = self.session.post(url, json=body, timeout=120)
        except requests.RequestException as e:
            raise ProviderError("Gemini", str(e)) from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(float(retry_after) if retry_after and retry_after.isdigit() else None)
        if not response.ok:
            raise ProviderError("Gemini", f"{response.status_code} {response.text[:500]}")

        return response.json()

    def _call_with_retry_sync(self, body: dict, prompt_chars: int) -> dict:
        start = time.time()
        for attempt in range(self.max_retries):
            try:
                data = self._post_sync(body)
                if self.app_logger:
                    self.app_logger.api_call("gemini", self.model, prompt_chars, time.time() - start)
                return data
            except RateLimitError as e:
                if attempt == self.max_retries - 1:
                    break
                delay = self._backoff(attempt, e.retry_after)
                logger.warning(f"Gemini rate limited, retrying in {delay:.1f}s (attempt {attempt + 1}/{self.max_retries})")
                time.sleep(delay)

        if self.app_logger:
            self.app_logger.api_call("gemini", self.model, prompt_chars, time.time() - start, status="rate_limited")
        raise ProviderError("Gemini", f"rate limit persisted after {self.max_retries} attempts")

    def _generate_sync(self, prompt: str, json_mode: bool = False) -> str:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }
        if json_mode:
            body["generationConfig"]["responseMimeType"] = "application/json"
        data = self._call_with_retry_sync(body, len(prompt))

        candidates = data.get("candidates") or []
        parts = (candidates[0].get("content") or {}).get("parts") or [] if candidates else []
        text = parts[0].get("text") if parts else None
        if not text:
            reason = (candidates[0].get("finishReason") if candidates
                      else (data.get("promptFeedback") or {}).get("blockReason"))
            raise ProviderError("Gemini", f"No text in response (reason: {reason or 'unknown'})")
        return text

    async def generate(self, prompt: str, json_mode: bool = False) -> str:
        """
        Complete a prompt.

        Args:
            json_mode: Ask Gemini for an application/json response

        Raises:
            ProviderError: non-success status, exhausted retries, or empty reply
        """
        return await self._run_async(self._generate_sync, prompt, json_mode)

    async def generate_json(self, prompt: str) -> Any:
        """Complete a prompt and extract the JSON payload from the reply"""
        text = await self.generate(prompt, json_mode=True)
        return extract_json(text)
