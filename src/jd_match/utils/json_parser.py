"""Utility to extract JSON objects from LLM responses."""

from __future__ import annotations

import json
import re

_FENCED_OBJECT = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)
_MINIMAL_OBJECT = re.compile(r"\{[\s\S]*?\}")
_GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")
_FENCE_LINE = re.compile(r"^\s*```[\w-]*\s*$")


def find_json_candidates(text: str) -> list[str]:
    """Return candidate object spans in the order they should be tried.

    1. An object inside a fenced code block
    2. The first minimal '{...}' span
    3. The greedy '{...}' span from the first '{' to the last '}'
    """
    if not text:
        return []

    candidates: list[str] = []
    for pattern in (_FENCED_OBJECT, _MINIMAL_OBJECT, _GREEDY_OBJECT):
        match = pattern.search(text)
        if match is None:
            continue
        span = match.group(1) if match.groups() else match.group(0)
        if span not in candidates:
            candidates.append(span)
    return candidates


def extract_json(text: str) -> dict:
    """Extract the first parseable JSON object from an LLM response.

    Raises ValueError when no candidate span parses to an object.
    """
    for span in find_json_candidates(text or ""):
        try:
            data = json.loads(span)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    raise ValueError(f"Could not extract JSON from text: {(text or '')[:200]}...")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence marker lines from text."""
    lines = [line for line in text.split("\n") if not _FENCE_LINE.match(line)]
    return "\n".join(lines).strip()
