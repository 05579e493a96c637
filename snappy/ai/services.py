"""Task assistant built on the LLM client.

Model output is parsed as JSON. A reply that cannot be parsed, a disabled
assistant (``client is None``) or a provider failure all fall back to a
degraded default instead of failing the request; only
``summarize_transcript`` has nothing sensible to fall back to when the
provider itself fails, and raises ``UpstreamError``.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import Any

from snappy.core.exceptions import UpstreamError
from snappy.integrations.llm import prompts
from snappy.integrations.llm.client import ImagePart
from snappy.integrations.llm.client import LLMClient
from snappy.integrations.llm.client import LLMError

logger = logging.getLogger(__name__)

ENERGY_LEVELS = ("low", "medium", "high")
TEXT_PRIORITIES = ("high", "medium", "low")
HIGH_ENERGY_WORDS = ("write", "design", "plan")
_FENCE_RE = re.compile(r"```(?:json)?\s*")


def strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def parse_json(text: str | None, expected: type = dict) -> Any | None:
    """Parse a model reply, tolerating fences and chatter around the JSON."""
    if not text:
        return None
    cleaned = strip_fences(text)
    try:
        parsed = json.loads(cleaned)
    except ValueError:
        pattern = r"\[[\s\S]*\]" if expected is list else r"\{[\s\S]*\}"
        match = re.search(pattern, cleaned)
        if match is None:
            return None
        try:
            parsed = json.loads(match.group(0))
        except ValueError:
            return None
    return parsed if isinstance(parsed, expected) else None


def _generate(
    client: LLMClient | None,
    prompt: str,
    images: Sequence[ImagePart] | None = None,
) -> str | None:
    if client is None:
        return None
    try:
        return client.generate(prompt, images)
    except LLMError as exc:
        logger.warning("LLM generation failed, using fallback: %s", exc)
        return None


def _clamp(value: Any, low: float, high: float, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return min(max(number, low), high)


def classification_fallback(title: str) -> dict[str, Any]:
    words = title.lower()
    return {
        "energy": "high" if any(w in words for w in HIGH_ENERGY_WORDS) else "medium",
        "duration": 30,
        "tags": ["general"],
        "confidence": 0.3,
    }


def auto_classify_task(
    title: str,
    note: str = "",
    *,
    client: LLMClient | None = None,
) -> dict[str, Any]:
    """Suggest energy, duration and tags for a task title."""
    parsed = parse_json(_generate(client, prompts.build_classify_prompt(title, note)))
    if parsed is None:
        return classification_fallback(title)

    tags = parsed.get("tags")
    return {
        "energy": parsed.get("energy") if parsed.get("energy") in ENERGY_LEVELS else "medium",
        "duration": int(_clamp(parsed.get("duration") or 30, 5, 480, 30)),
        "tags": [str(t).strip().lower() for t in tags[:5]] if isinstance(tags, list) else [],
        "confidence": _clamp(parsed.get("confidence") or 0.7, 0.0, 1.0, 0.7),
    }


def extract_task_from_text(text: str, *, client: LLMClient | None = None) -> dict[str, Any]:
    parsed = parse_json(_generate(client, prompts.build_extract_task_prompt(text)))
    if (
        parsed is None
        or not parsed.get("title")
        or parsed.get("priority") not in TEXT_PRIORITIES
        or not isinstance(parsed.get("tags"), list)
        or not isinstance(parsed.get("suggestedSubtasks"), list)
    ):
        return {
            "title": text.strip()[:100],
            "priority": "medium",
            "dueDate": None,
            "tags": [],
            "suggestedSubtasks": [],
        }
    parsed.setdefault("dueDate", None)
    return parsed


def extract_tasks_from_image(
    data: bytes,
    mime_type: str = "image/jpeg",
    *,
    client: LLMClient | None = None,
) -> list[dict[str, Any]]:
    reply = _generate(
        client,
        prompts.build_image_tasks_prompt(),
        [ImagePart(data=data, mime_type=mime_type)],
    )
    tasks = parse_json(reply, list) or []
    return [task for task in tasks if isinstance(task, dict)]


def breakdown_task(title: str, note: str = "", *, client: LLMClient | None = None):
    steps = parse_json(_generate(client, prompts.build_breakdown_prompt(title, note)), list)
    return [step for step in steps or [] if isinstance(step, dict)]


def smart_suggestions(context: dict[str, Any], *, client: LLMClient | None = None):
    reply = _generate(client, prompts.build_suggestions_prompt(context))
    return [s for s in parse_json(reply, list) or [] if isinstance(s, dict)]


def empty_summary(summary: str = "") -> dict[str, Any]:
    return {"summary": summary, "keyPoints": [], "tasks": [], "decisions": [], "questions": []}


def summarize_transcript(transcript: str, *, client: LLMClient | None = None) -> dict[str, Any]:
    if client is None:
        return empty_summary()
    try:
        reply = client.generate(prompts.build_transcript_prompt(transcript))
    except LLMError as exc:
        logger.warning("Transcript summary failed: %s", exc)
        msg = "AI provider is unavailable"
        raise UpstreamError(msg) from exc

    parsed = parse_json(reply)
    if parsed is None:
        # Keep the prose the model did return.
        return empty_summary(strip_fences(reply)[:2000])
    return {**empty_summary(), **parsed}
