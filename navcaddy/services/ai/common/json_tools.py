"""Tolerant JSON extraction from model responses.

Handles markdown fences, chatty prefixes/suffixes and nested braces.
Never raises: anything unparseable comes back as ``None``.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
# Slice attempts before giving up; deeply nested garbage makes the scan quadratic.
MAX_SCAN_CANDIDATES = 64


def strip_fences(text: str) -> str:
    """Return the body of the first fenced block, or *text* unchanged."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    stripped = text.strip()
    # Unterminated fence (truncated response)
    if stripped.startswith("```"):
        return stripped.split("\n", 1)[-1] if "\n" in stripped else stripped[3:]
    return stripped


def extract_json(text: str) -> dict | list | None:
    """Extract the first valid JSON object or array from *text*.

    Strategy:
    1. Strip markdown fences.
    2. ``json.loads`` on the remaining text (fast path).
    3. Scan for ``{``/``[`` and try a brace-balanced slice at each one.
    """
    if not text or not text.strip():
        return None

    body = strip_fences(text)

    try:
        return json.loads(body)
    except (ValueError, RecursionError):
        pass

    attempts = 0
    for i, ch in enumerate(body):
        if ch == "{":
            result = _extract_balanced(body, i, "{", "}")
        elif ch == "[":
            result = _extract_balanced(body, i, "[", "]")
        else:
            continue
        if result is not None:
            return result
        attempts += 1
        if attempts >= MAX_SCAN_CANDIDATES:
            logger.debug("Gave up JSON scan after %d candidates", attempts)
            break

    return None


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Like ``extract_json`` but only accepts a top-level object."""
    parsed = extract_json(text)
    if isinstance(parsed, dict):
        return parsed
    if isinstance(parsed, list):
        # Some models wrap the single answer in a list
        for item in parsed:
            if isinstance(item, dict):
                return item
    return None


def _extract_balanced(text: str, start: int, open_ch: str, close_ch: str) -> dict | list | None:
    depth = 0
    in_string = False
    escape = False

    for i in range(start, len(text)):
        ch = text[i]

        if escape:
            escape = False
            continue
        if ch == "\\":
            if in_string:
                escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                try:
                    return json.loads(text[start : i + 1])
                except (ValueError, RecursionError):
                    return None

    return None
