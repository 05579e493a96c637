"""Prompt builders for the task assistant.

Every prompt asks for bare JSON; callers still tolerate markdown fences and
surrounding prose because models do not always comply.
"""

from __future__ import annotations

import json
from typing import Any


def build_classify_prompt(title: str, note: str = "") -> str:
    details = f"\nDETAILS: {note.strip()}" if note and note.strip() else ""
    return (
        "You are a task classification AI. Analyze this task and return ONLY valid JSON.\n\n"
        f'TASK: "{title}"{details}\n\n'
        "Return this exact structure:\n"
        '{"energy": "low" | "medium" | "high", "duration": <minutes>, '
        '"tags": ["tag1", "tag2"], "confidence": <0.0 to 1.0>}\n\n'
        "RULES:\n"
        '- Energy: "high" for creative or strategic work, "medium" for standard '
        'tasks, "low" for simple admin\n'
        "- Duration: realistic estimate in minutes (5-120)\n"
        "- Tags: 2-4 relevant tags, lowercase, no #\n"
        "- Confidence: how sure you are (0.7+ for clear tasks)\n\n"
        'Example: "Buy milk" -> {"energy": "low", "duration": 15, '
        '"tags": ["shopping", "personal"], "confidence": 0.95}\n\n'
        "OUTPUT (JSON only):"
    )


def build_extract_task_prompt(text: str) -> str:
    return (
        "You are a strict JSON API. Parse the user input and return ONLY valid "
        "JSON. No explanations, no markdown.\n\n"
        "OUTPUT SCHEMA:\n"
        '{"title": "string", "priority": "high" | "medium" | "low", '
        '"dueDate": "ISO 8601 string or null", "tags": ["string"], '
        '"suggestedSubtasks": ["string"]}\n\n'
        "RULES:\n"
        '- "urgent", "asap", "important" -> "high"; "someday", "maybe" -> "low"; '
        'otherwise "medium"\n'
        '- Convert phrases like "next Friday" or "tomorrow" to ISO dates\n'
        '- Tags come from # symbols ("#work" -> "work")\n'
        "- Suggest 2-4 subtasks if the task is complex\n"
        "- dueDate is null when no date is mentioned\n\n"
        f'USER INPUT:\n"{text}"\n\nOUTPUT (JSON only):'
    )


_TASK_ARRAY_SHAPE = (
    '[{"title": "task title", "note": "details", "dueAt": "ISO date or null", '
    '"priority": 0-3 (0=urgent, 1=high, 2=normal, 3=low), "tags": ["tag"], '
    '"subSteps": [{"title": "substep", "completed": false}]}]'
)


def build_image_tasks_prompt() -> str:
    return (
        "Analyze this image and extract all tasks, assignments, deadlines or "
        "action items, including handwritten text.\n"
        f"Return ONLY a JSON array with this structure:\n{_TASK_ARRAY_SHAPE}\n"
        "Return ONLY the JSON array, no explanations."
    )


def build_breakdown_prompt(title: str, note: str = "") -> str:
    return (
        "Break down this task into specific, actionable subtasks:\n\n"
        f"Task: {title}\nDetails: {note or 'No additional details'}\n\n"
        'Return ONLY a JSON array: [{"text": "subtask description", '
        '"estimatedMinutes": number}]\n'
        "Make subtasks specific, in logical order, with realistic estimates and "
        "not too granular. Return ONLY the JSON array."
    )


def build_suggestions_prompt(context: dict[str, Any]) -> str:
    return (
        "You are a productivity assistant. Analyze the user's context and give "
        "3-5 smart, actionable suggestions.\n\n"
        f"Context:\n{json.dumps(context, ensure_ascii=False, default=str)}\n\n"
        'Return ONLY a JSON array: [{"type": "focus|break|prioritize|breakdown|schedule", '
        '"suggestion": "text", "action": "actionable command", "reasoning": "why"}]'
    )


def build_transcript_prompt(transcript: str) -> str:
    return (
        "Summarize this meeting or lecture transcript and extract actionable items.\n\n"
        f"Transcript:\n{transcript}\n\n"
        'Return ONLY a JSON object: {"summary": "concise summary", '
        '"keyPoints": ["point"], "tasks": [{"title": "task", "note": "details", '
        '"dueAt": "ISO date or null", "priority": 0-3}], "decisions": ["decision"], '
        '"questions": ["follow-up question"]}'
    )
