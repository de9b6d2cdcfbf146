"""Pull JSON values out of text-generation responses."""

from __future__ import annotations

import json
import re

_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?|\n?```\s*$")


def extract_json(text: str, expect: type | None = None) -> dict | list:
    """Extract the first JSON object or array from a model response.

    Handles ```json fences and prose around the value. With ``expect``
    (``list`` or ``dict``) only a value of that type is accepted.

    Raises:
        ValueError: no parseable JSON value of the expected type.
    """
    text = _FENCE.sub("", text.strip()).strip()

    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        value = None
    if value is not None and (expect is None or isinstance(value, expect)):
        return value

    decoder = json.JSONDecoder()
    openers = "[" if expect is list else "{" if expect is dict else "[{"
    for match in re.finditer(f"[{re.escape(openers)}]", text):
        try:
            value, _ = decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        if expect is None or isinstance(value, expect):
            return value

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def extract_string_list(text: str, expected_length: int | None = None) -> list[str]:
    """Extract a JSON array of strings, optionally of an exact length.

    Raises:
        ValueError: not an array of strings, or the wrong length.
    """
    value = extract_json(text, expect=list)
    if not all(isinstance(item, str) for item in value):
        raise ValueError("JSON array contains non-string items")
    if expected_length is not None and len(value) != expected_length:
        raise ValueError(f"Expected {expected_length} items, got {len(value)}")
    return [item.strip() for item in value]
