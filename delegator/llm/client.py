"""
Completion client for OpenAI-compatible chat APIs (Gemini OpenAI endpoint, Z.AI/GLM, etc.).

Both the single-shot and the streaming call retry rate-limit failures with
exponential backoff. Permanent quota exhaustion is never retried.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Iterator, Optional

from dotenv import load_dotenv
from openai import OpenAI

from delegator.errors import MissingCredentialsError, QuotaExhaustedError, TransientProviderError
from delegator.generation.config import GenerationConfig

# Load .env file if it exists
project_root = Path(__file__).resolve().parents[2]
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)


# Generic OpenAI-compatible endpoint: set LLM_BASE_URL + LLM_API_KEY
LLM_BASE_URL = os.getenv("LLM_BASE_URL")
LLM_API_KEY = os.getenv("LLM_API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL", "gemini-2.5-flash-lite")

# Gemini fallback
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

MAX_RETRIES = 3
BASE_DELAY_S = 2.0

_RATE_LIMIT_MARKERS = (
    "429",
    "rate limit",
    "rate_limit",
    "too many requests",
    "resource has been exhausted",
    "concurrency",
    "quota",
)
# Per-minute limits also say "exceeded your current quota"; only these are permanent.
_QUOTA_EXHAUSTED_MARKERS = (
    "insufficient_quota",
    "daily quota",
    "perday",
    "per day",
)
QUOTA_EXHAUSTED_MESSAGE = (
    "Model provider quota exhausted. The quota has to reset or be raised before "
    "further requests can succeed."
)

logger = logging.getLogger(__name__)


def is_quota_exhausted(error: BaseException) -> bool:
    msg = str(error).lower()
    return any(m in msg for m in _QUOTA_EXHAUSTED_MARKERS)


def is_rate_limited(error: BaseException) -> bool:
    if is_quota_exhausted(error):
        return False
    msg = str(error).lower()
    return any(m in msg for m in _RATE_LIMIT_MARKERS)


def _resolve_client_params(
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> tuple[str, str, str]:
    """Resolve model, api_key, base_url from args or env (LLM_* when set, else Gemini)."""
    use_generic = (LLM_BASE_URL and LLM_API_KEY) or (base_url and api_key)
    if use_generic:
        base = base_url or LLM_BASE_URL or ""
        key = api_key or LLM_API_KEY or ""
        if base and key:
            return model_name or LLM_MODEL, key, base
    key = api_key or os.getenv("GEMINI_API_KEY")
    base = base_url or GEMINI_BASE_URL
    return model_name or LLM_MODEL, key or "", base


class CompletionClient:
    """OpenAI-compatible chat client with bounded retry on rate limits."""

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        *,
        client: Any = None,
        max_retries: int = MAX_RETRIES,
        base_delay: float = BASE_DELAY_S,
        config: Optional[GenerationConfig] = None,
    ):
        self.model_name, key, self.base_url = _resolve_client_params(
            model_name=model_name, api_key=api_key, base_url=base_url
        )
        if client is None:
            if not key:
                raise MissingCredentialsError(
                    "API key required. Set LLM_API_KEY + LLM_BASE_URL or GEMINI_API_KEY."
                )
            client = OpenAI(base_url=self.base_url, api_key=key)
        self.client = client
        self.max_retries = max(0, max_retries)
        self.base_delay = base_delay
        self.config = config or GenerationConfig()

    def _request_kwargs(self, prompt: str, stream: bool = False) -> dict:
        create_kw: dict = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if stream:
            create_kw["stream"] = True
        return create_kw

    def _backoff(self, error: Exception, attempt: int) -> bool:
        """Sleep before the next try and return True, or return False when the error is final."""
        if not is_rate_limited(error) or attempt >= self.max_retries:
            return False
        delay = self.base_delay * (2 ** attempt)
        logger.warning(
            "Rate limit hit (attempt %s/%s). Retrying in %s s",
            attempt + 1,
            self.max_retries,
            round(delay, 1),
        )
        time.sleep(delay)
        return True

    def _final_error(self, error: Exception) -> Exception:
        if is_quota_exhausted(error):
            return QuotaExhaustedError(QUOTA_EXHAUSTED_MESSAGE)
        if is_rate_limited(error):
            return TransientProviderError(
                f"Rate limit still exceeded after {self.max_retries} retries: {error}"
            )
        return error

    def complete(self, prompt: str) -> str:
        """Generate text for a single prompt."""
        attempt = 0
        while True:
            try:
                response = self.client.chat.completions.create(**self._request_kwargs(prompt))
            except Exception as e:
                if self._backoff(e, attempt):
                    attempt += 1
                    continue
                final = self._final_error(e)
                if final is e:
                    raise
                raise final from e

            if not response.choices:
                logger.warning("Empty response from completion API")
                return ""
            text = response.choices[0].message.content or ""
            if not text.strip():
                logger.warning(
                    "Empty content in response (finish_reason=%s)",
                    getattr(response.choices[0], "finish_reason", "?"),
                )
            return text.strip()

    def stream(self, prompt: str) -> Iterator[str]:
        """
        Stream text fragments for a single prompt.

        Retries happen only before the first fragment is yielded; a failure
        after that propagates unchanged.
        """
        attempt = 0
        started = False
        while True:
            try:
                response = self.client.chat.completions.create(
                    **self._request_kwargs(prompt, stream=True)
                )
                try:
                    for chunk in response:
                        if not chunk.choices:
                            continue
                        content = chunk.choices[0].delta.content
                        if content:
                            started = True
                            yield content
                finally:
                    close = getattr(response, "close", None)
                    if close is not None:
                        close()
                return
            except Exception as e:
                if started:
                    raise
                if self._backoff(e, attempt):
                    attempt += 1
                    continue
                final = self._final_error(e)
                if final is e:
                    raise
                raise final from e


def create_client(
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    config: Optional[GenerationConfig] = None,
) -> CompletionClient:
    """Create an OpenAI-compatible completion client from args or environment."""
    return CompletionClient(model_name=model_name, api_key=api_key, base_url=base_url, config=config)
