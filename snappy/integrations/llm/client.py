from __future__ import annotations

import base64
import json
import logging
import time
import urllib.error
import urllib.request
from collections.abc import Callable
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from django.conf import settings

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


class LLMError(Exception):
    """Base class for generation provider failures."""


class TransientLLMError(LLMError):
    """Worth retrying: rate limits, provider outages, network errors."""


class PermanentLLMError(LLMError):
    """Retrying will not help: bad request, bad key, blocked or empty output."""


class LLMNotConfiguredError(LLMError):
    """Raised when an LLM client is enabled but missing configuration."""


@dataclass
class LLMConfig:
    provider: str = "gemini"
    model: str = "gemini-2.5-flash"
    api_key: str | None = None
    timeout: float = 30.0
    max_retries: int = 3
    backoff_seconds: float = 1.0


@dataclass(frozen=True)
class ImagePart:
    data: bytes
    mime_type: str = "image/jpeg"


class LLMClient:
    """Provider-agnostic text generation with bounded retries.

    ``generate`` makes up to ``max_retries`` attempts, sleeping
    ``backoff_seconds * attempt`` after each transient failure. A permanent
    failure, or the last transient one, is raised to the caller. There is no
    cancellation: once started, a call runs until it succeeds or the attempts
    are used up.
    """

    def __init__(self, cfg: LLMConfig, sleep: Callable[[float], None] = time.sleep):
        self.cfg = cfg
        self._sleep = sleep

    def generate(self, prompt: str, images: Sequence[ImagePart] | None = None) -> str:
        attempts = max(1, int(self.cfg.max_retries))
        for attempt in range(1, attempts + 1):
            try:
                return self._generate_once(prompt, images or ())
            except TransientLLMError as exc:
                if attempt == attempts:
                    logger.warning("LLM call failed after %s attempts: %s", attempts, exc)
                    raise
                delay = self.cfg.backoff_seconds * attempt
                logger.info(
                    "LLM attempt %s/%s failed (%s); retrying in %.1fs",
                    attempt,
                    attempts,
                    exc,
                    delay,
                )
                self._sleep(delay)
        msg = "unreachable"
        raise AssertionError(msg)

    def _generate_once(self, prompt: str, images: Sequence[ImagePart]) -> str:
        raise NotImplementedError


class GeminiClient(LLMClient):
    """Minimal Gemini HTTP client using REST; no SDK."""

    def __init__(self, cfg: LLMConfig, sleep: Callable[[float], None] = time.sleep):
        if not cfg.api_key:
            msg = "GEMINI_API_KEY missing"
            raise LLMNotConfiguredError(msg)
        super().__init__(cfg, sleep)

    def _build_payload(self, prompt: str, images: Sequence[ImagePart]) -> dict[str, Any]:
        parts: list[dict[str, Any]] = [{"text": prompt}]
        parts.extend(
            {
                "inlineData": {
                    "mimeType": image.mime_type,
                    "data": base64.b64encode(image.data).decode("ascii"),
                },
            }
            for image in images
        )
        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": 0.4, "maxOutputTokens": 8192},
        }

    def _generate_once(self, prompt: str, images: Sequence[ImagePart]) -> str:
        url = GEMINI_URL.format(model=self.cfg.model)
        req = urllib.request.Request(  # noqa: S310 - external URL by config
            url,
            data=json.dumps(self._build_payload(prompt, images)).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.cfg.api_key or "",
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.cfg.timeout) as resp:  # noqa: S310 - external URL by config
                raw = resp.read()
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", "ignore")[:500]
            msg = f"Gemini HTTP {e.code}: {body}"
            if e.code in RETRYABLE_STATUS:
                raise TransientLLMError(msg) from e
            raise PermanentLLMError(msg) from e
        except (urllib.error.URLError, TimeoutError, ConnectionError) as e:
            msg = f"Gemini request failed: {e}"
            raise TransientLLMError(msg) from e

        try:
            obj = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            msg = "Gemini returned a non-JSON envelope"
            raise TransientLLMError(msg) from e
        return self._extract_text(obj)

    @staticmethod
    def _extract_text(obj: dict[str, Any]) -> str:
        # candidates -> content -> parts -> text
        candidates = obj.get("candidates") or []
        if not candidates:
            reason = (obj.get("promptFeedback") or {}).get("blockReason", "no candidates")
            msg = f"Gemini returned no output ({reason})"
            raise PermanentLLMError(msg)
        parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text:
            msg = "Gemini returned an empty answer"
            raise PermanentLLMError(msg)
        return text


def get_llm_client_from_settings() -> LLMClient | None:
    """Factory reading settings to return a configured LLM client.

    Returns None when disabled or misconfigured.
    """
    if not getattr(settings, "SNAPPY_AI_ENABLED", False):
        return None

    cfg = LLMConfig(
        provider=getattr(settings, "LLM_PROVIDER", "gemini"),
        model=getattr(settings, "LLM_MODEL", LLMConfig.model),
        api_key=getattr(settings, "GEMINI_API_KEY", None),
        timeout=float(getattr(settings, "LLM_TIMEOUT", LLMConfig.timeout)),
        max_retries=int(getattr(settings, "LLM_MAX_RETRIES", LLMConfig.max_retries)),
        backoff_seconds=float(
            getattr(settings, "LLM_RETRY_BACKOFF_SECONDS", LLMConfig.backoff_seconds),
        ),
    )
    if cfg.provider == "gemini":
        try:
            return GeminiClient(cfg)
        except LLMNotConfiguredError:
            logger.info("LLM enabled but GEMINI_API_KEY missing; skipping LLM")
            return None
    logger.info("LLM provider '%s' not supported; skipping LLM", cfg.provider)
    return None
