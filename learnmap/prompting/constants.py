"""Shared constants for function-map prompting."""

from __future__ import annotations

SYSTEM_PROMPT = (
    "You explain user interfaces to first-time visitors. Reply with a single JSON object "
    "that maps short kebab-case element ids to one-sentence plain-language explanations. "
    "Never wrap the object in prose."
)

PAGE_EXAMPLE_IDS: tuple[str, ...] = (
    "main-header",
    "hero-section",
    "contact-form",
    "navigation",
    "search-bar",
)

FILE_EXAMPLE_IDS: tuple[str, ...] = (
    "login-button",
    "user-profile",
    "dashboard-nav",
)


__all__ = ["FILE_EXAMPLE_IDS", "PAGE_EXAMPLE_IDS", "SYSTEM_PROMPT"]
