"""Browser plugin compilation."""

from .compiler import DEFAULT_MARKER_ATTRIBUTE, PluginCompiler

__all__ = ["DEFAULT_MARKER_ATTRIBUTE", "PluginCompiler"]
