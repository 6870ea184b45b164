"""Tests for plugin script compilation."""

from __future__ import annotations

import json
import re

import pytest

from learnmap.errors import ValidationError
from learnmap.plugin import PluginCompiler


def _embedded_map_literal(script: str) -> dict:
    match = re.search(r'^  var FUNCTION_MAP = JSON\.parse\((".*")\);$', script, re.MULTILINE)
    assert match, "embedded map literal missing"
    return json.loads(json.loads(match.group(1)))


def test_embedded_plugin_contains_map_and_makes_no_requests() -> None:
    function_map = {"main-header": "Site header", "search-bar": "Finds pages"}

    script = PluginCompiler().compile_embedded(function_map)

    assert _embedded_map_literal(script) == function_map
    assert "fetch(" not in script
    assert "Learning Mode: OFF" in script
    assert '"data-learn-id"' in script


def test_embedded_plugin_escapes_markup_in_explanations() -> None:
    function_map = {"footer": "</script><script>alert('x')</script>"}

    script = PluginCompiler().compile_embedded(function_map)

    assert "</script>" not in script
    assert _embedded_map_literal(script) == function_map


def test_embedded_plugin_keeps_prototype_named_ids() -> None:
    function_map = {"__proto__": "Account menu", "constructor": "Builds a report"}

    script = PluginCompiler().compile_embedded(function_map)

    assert _embedded_map_literal(script) == function_map
    assert "JSON.parse(" in script


def test_fetching_plugin_targets_lookup_endpoint() -> None:
    script = PluginCompiler().compile_fetching("https://maps.example.com/lookup")

    assert 'var LOOKUP_ENDPOINT = "https://maps.example.com/lookup";' in script
    assert "var EMBEDDED_KEY = null;" in script
    assert "data-api-key" in script
    assert "FUNCTION_MAP" not in script


def test_fetching_plugin_can_bake_in_key() -> None:
    script = PluginCompiler().compile_fetching("https://maps.example.com/lookup", key="learn_abc")

    assert 'var EMBEDDED_KEY = "learn_abc";' in script


def test_fetching_plugin_requires_endpoint() -> None:
    with pytest.raises(ValidationError):
        PluginCompiler().compile_fetching("  ")


def test_custom_marker_attribute_is_used() -> None:
    script = PluginCompiler(marker_attribute="data-help").compile_embedded({"a": "b"})

    assert 'var MARKER_ATTRIBUTE = "data-help";' in script


def test_invalid_marker_attribute_rejected() -> None:
    with pytest.raises(ValidationError):
        PluginCompiler(marker_attribute='x"] , body[y')
