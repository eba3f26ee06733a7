"""Classification JSON contract: tag vocabulary and strict parse/repair."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from libs.core.models import Classification

# Preferred tags offered to the model
TAG_VOCABULARY: List[str] = [
    "工作",
    "學習",
    "旅遊",
    "美食",
    "購物",
    "健康",
    "財務",
    "生活",
    "科技",
    "娛樂",
    "閱讀",
    "想法",
    "待辦",
]
MAX_TAGS = 5
MAX_FREE_TAGS = 2

CLASSIFICATION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "summary": {"type": "string"},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["title", "summary", "tags"],
    "additionalProperties": False,
}


@dataclass(frozen=True)
class InvalidClassification:
    """Backend output that could not be turned into a classification."""

    reason: str
    preview: str = ""


def strip_json_wrappers(text: str) -> str:
    """Try to clean common wrappers around JSON.

    - Strip code fences like ```json ... ``` or ``` ... ```
    - If still not bare JSON, slice from first '{' to last '}'
    """
    s = text.strip()
    if s.startswith("```"):
        lines = s.splitlines()
        try:
            end_idx = next(i for i, line in enumerate(lines[1:], start=1) if line.strip().startswith("```"))
            s = "\n".join(lines[1:end_idx]).strip()
        except StopIteration:
            # No closing fence; fall back to slicing braces below
            s = "\n".join(lines[1:]).strip()
    if s.startswith("{") and s.endswith("}"):
        return s
    start = s.find("{")
    end = s.rfind("}")
    if start != -1 and end > start:
        return s[start : end + 1].strip()
    return s


def _as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_tags(raw: Any) -> List[str]:
    """Keep vocabulary tags freely, at most ``MAX_FREE_TAGS`` others, ``MAX_TAGS`` total."""
    if not isinstance(raw, list):
        return []
    tags: List[str] = []
    free = 0
    for item in raw:
        if not isinstance(item, str):
            continue
        tag = item.strip().lstrip("#").strip()
        if not tag or tag in tags:
            continue
        if tag not in TAG_VOCABULARY:
            if free >= MAX_FREE_TAGS:
                continue
            free += 1
        tags.append(tag)
        if len(tags) >= MAX_TAGS:
            break
    return tags


def parse_classification(text: str) -> Union[Classification, InvalidClassification]:
    s = (text or "").strip()
    if not s:
        return InvalidClassification("empty")
    try:
        data = json.loads(s)
    except ValueError:
        cleaned = strip_json_wrappers(s)
        try:
            data = json.loads(cleaned)
        except ValueError:
            preview = (cleaned[:200] + "…") if len(cleaned) > 200 else cleaned
            return InvalidClassification("not_json", preview)
    if not isinstance(data, dict):
        return InvalidClassification("not_object", s[:200])
    return Classification(
        title=_as_text(data.get("title")),
        summary=_as_text(data.get("summary")),
        tags=normalize_tags(data.get("tags")),
    )


__all__ = [
    "TAG_VOCABULARY",
    "MAX_TAGS",
    "MAX_FREE_TAGS",
    "CLASSIFICATION_SCHEMA",
    "InvalidClassification",
    "strip_json_wrappers",
    "normalize_tags",
    "parse_classification",
]
