"""Compiles function maps into injectable, dependency-free plugin scripts."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..errors import ValidationError

DEFAULT_MARKER_ATTRIBUTE = "data-learn-id"
_ATTRIBUTE_PATTERN = re.compile(r"^[A-Za-z_][-A-Za-z0-9_.]*$")


class PluginCompiler:
    """Renders the browser runtime with either an embedded map or a lookup endpoint."""

    TEMPLATE = "runtime.js.j2"

    def __init__(self, *, marker_attribute: str = DEFAULT_MARKER_ATTRIBUTE) -> None:
        if not _ATTRIBUTE_PATTERN.match(marker_attribute):
            raise ValidationError(f"Invalid marker attribute name: {marker_attribute!r}")
        self.marker_attribute = marker_attribute
        self._env = Environment(
            loader=FileSystemLoader(str(Path(__file__).with_name("templates"))),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

    def compile_embedded(self, function_map: Mapping[str, str]) -> str:
        """Return a script with ``function_map`` baked in as a literal; it makes no requests."""
        return self._render(
            variant="embedded",
            embedded=True,
            function_map=dict(function_map),
        )

    def compile_fetching(self, lookup_endpoint: str, key: Optional[str] = None) -> str:
        """Return a script that fetches its map from ``lookup_endpoint`` at startup.

        When ``key`` is omitted the script reads it from the ``data-api-key``
        attribute of its own ``<script>`` tag.
        """
        if not lookup_endpoint or not lookup_endpoint.strip():
            raise ValidationError("A lookup endpoint is required for the fetching plugin")
        return self._render(
            variant="fetching",
            embedded=False,
            lookup_endpoint=lookup_endpoint.strip(),
            key=key or None,
        )

    def _render(self, **context: object) -> str:
        template = self._env.get_template(self.TEMPLATE)
        return template.render(marker_attribute=self.marker_attribute, **context)


__all__ = ["DEFAULT_MARKER_ATTRIBUTE", "PluginCompiler"]
