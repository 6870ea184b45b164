"""Validation of raw model output into a strict function map."""

from __future__ import annotations

import json
import re
from typing import Dict, Iterable, Mapping

from .errors import ParseError
from .logging import get_logger
from .models import AnalysisKind, FunctionMap

FALLBACK_MAPS: Mapping[AnalysisKind, Mapping[str, str]] = {
    AnalysisKind.PAGE: {
        "main-header": "The main navigation header of the website",
        "hero-section": "The primary hero section introducing the website",
        "content-area": "Main content area with key information",
        "footer": "Website footer with additional links and information",
    },
    AnalysisKind.REPO: {
        "app-component": "Main application component",
        "user-interface": "User interface elements",
        "navigation": "Application navigation system",
        "content-display": "Content display components",
    },
}

_FENCE_PATTERN = re.compile(r"^```[A-Za-z0-9_-]*\s*\n(?P<body>.*?)\n?```$", re.DOTALL)

logger = get_logger("normalizer")


def fallback_map(kind: AnalysisKind) -> FunctionMap:
    """Return a fresh copy of the fixed fallback map for ``kind``."""
    return dict(FALLBACK_MAPS[AnalysisKind(kind)])


def parse_function_map(raw: str) -> FunctionMap:
    """Parse one model response as a JSON object of non-blank strings to non-blank strings."""
    if not isinstance(raw, str):
        raise ParseError("Response is not text")
    text = raw.strip()
    fenced = _FENCE_PATTERN.match(text)
    if fenced:
        text = fenced.group("body").strip()
    if not text:
        raise ParseError("Response is empty")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Response is not valid JSON: {exc.msg}") from exc

    if not isinstance(payload, dict):
        raise ParseError(f"Expected a JSON object, got {type(payload).__name__}")

    parsed: Dict[str, str] = {}
    for key, value in payload.items():
        if not isinstance(value, str) or not key.strip() or not value.strip():
            raise ParseError(f"Entry {key!r} is not a non-empty string explanation")
        parsed[key] = value
    return parsed


def normalize(raw_responses: Iterable[str], kind: AnalysisKind) -> FunctionMap:
    """Merge every parseable response, later ones winning, or fall back when nothing parses."""
    merged: FunctionMap = {}
    for index, raw in enumerate(raw_responses):
        try:
            merged.update(parse_function_map(raw))
        except ParseError as exc:
            logger.debug("Discarding response %d: %s", index, exc)
    if not merged:
        logger.info("No usable model output; using the %s fallback map", AnalysisKind(kind).value)
        return fallback_map(kind)
    return merged


__all__ = ["FALLBACK_MAPS", "fallback_map", "normalize", "parse_function_map"]
