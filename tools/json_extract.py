"""Recover a JSON object from free-form model output."""

import json
from typing import Any


def extract_balanced_json(text: str) -> str | None:
    """Return the first balanced ``{...}`` span in *text*, or None if none closes.

    Braces inside string literals are ignored, and a backslash inside a string
    escapes the next character.
    """
    start = text.find("{")
    if start == -1:
        return None

    in_string = False
    escape_next = False
    depth = 0

    for i in range(start, len(text)):
        char = text[i]
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            if in_string:
                escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None


def parse_json_object(text: str) -> dict[str, Any] | None:
    """Decode the first JSON object in *text*; None when it is missing or not an object."""
    trimmed = (text or "").strip()
    candidate = extract_balanced_json(trimmed) or trimmed
    try:
        parsed = json.loads(candidate)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None
