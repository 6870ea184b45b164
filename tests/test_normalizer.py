"""Tests for function-map parsing and merging."""

from __future__ import annotations

import pytest

from learnmap.errors import ParseError
from learnmap.models import AnalysisKind
from learnmap.normalizer import FALLBACK_MAPS, fallback_map, normalize, parse_function_map


def test_parse_accepts_plain_and_fenced_json() -> None:
    assert parse_function_map('{"main-header": "Site header"}') == {"main-header": "Site header"}
    fenced = '```json\n{"search-bar": "Finds pages"}\n```'
    assert parse_function_map(fenced) == {"search-bar": "Finds pages"}


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "Here is your map: {}",
        '["main-header"]',
        '{"main-header": 3}',
        '{"main-header": ""}',
        '{"": "Blank id"}',
        '{"main-header": {"text": "nested"}}',
    ],
)
def test_parse_rejects_unusable_output(raw: str) -> None:
    with pytest.raises(ParseError):
        parse_function_map(raw)


def test_normalize_merges_with_last_write_wins() -> None:
    merged = normalize(
        [
            '{"login-button": "Signs in", "nav": "Old menu"}',
            "not json",
            '{"nav": "Main menu"}',
        ],
        AnalysisKind.REPO,
    )

    assert merged == {"login-button": "Signs in", "nav": "Main menu"}


@pytest.mark.parametrize("kind", [AnalysisKind.PAGE, AnalysisKind.REPO])
def test_normalize_falls_back_when_nothing_parses(kind: AnalysisKind) -> None:
    assert normalize(["nope", '{"x": 1}'], kind) == dict(FALLBACK_MAPS[kind])
    assert normalize([], kind) == dict(FALLBACK_MAPS[kind])


def test_fallback_map_is_a_fresh_copy() -> None:
    first = fallback_map(AnalysisKind.PAGE)
    first["main-header"] = "mutated"

    assert fallback_map(AnalysisKind.PAGE)["main-header"] != "mutated"
    assert list(fallback_map(AnalysisKind.PAGE)) == [
        "main-header",
        "hero-section",
        "content-area",
        "footer",
    ]
    assert list(fallback_map(AnalysisKind.REPO)) == [
        "app-component",
        "user-interface",
        "navigation",
        "content-display",
    ]
