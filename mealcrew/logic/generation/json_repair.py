"""Helpers for turning almost-JSON model output into Python objects."""
import json
import re
from json import JSONDecodeError
from typing import Any, Optional


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences and surrounding whitespace."""
    text = re.sub(r"```(?:json)?\s*\n(.*?)```", r"\1", text, flags=re.S)
    text = re.sub(r"^```(?:json)?|```$", "", text.strip())
    return text.strip()


def remove_trailing_commas(text: str) -> str:
    return re.sub(r",\s*(\}|\])", r"\1", text)


def extract_json_by_balancing(text: str) -> Optional[str]:
    """Extract the first complete JSON object/array by balancing braces/brackets."""
    start = None
    stack = []
    in_string = False
    escape = False

    for i, ch in enumerate(text):
        if escape:
            escape = False
            continue
        if in_string:
            if ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            if start is None:
                start = i
            stack.append(ch)
        elif ch in "}]":
            if not stack:
                continue
            opening = stack.pop()
            if (opening == "{" and ch != "}") or (opening == "[" and ch != "]"):
                return None
            if not stack and start is not None:
                return text[start:i + 1]
    return None


def parse_model_json(text: str) -> Optional[Any]:
    """Best-effort parse: raw, then fence-stripped, then the first balanced block.

    Returns None when nothing parses.
    """
    text = (text or "").strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except JSONDecodeError:
        pass
    cleaned = remove_trailing_commas(strip_code_fences(text))
    try:
        return json.loads(cleaned)
    except JSONDecodeError:
        pass
    candidate = extract_json_by_balancing(cleaned)
    if candidate:
        try:
            return json.loads(remove_trailing_commas(candidate))
        except JSONDecodeError:
            return None
    return None


def looks_truncated(text: str) -> bool:
    text = (text or "").strip()
    return '"meals"' in text and not text.endswith("}")


__all__ = ['strip_code_fences', 'remove_trailing_commas', 'extract_json_by_balancing',
           'parse_model_json', 'looks_truncated']
