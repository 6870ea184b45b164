"""Headless page rendering and structural digest extraction."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..errors import FetchError, RenderTimeout
from ..logging import get_logger
from ..models import FieldDescriptor, FormDescriptor, LinkDescriptor, PageDigest

RenderBackend = Callable[[str, float], Dict[str, Any]]

# Evaluated inside the loaded document; script/style content is removed first.
EXTRACT_SCRIPT = """
() => {
  document.querySelectorAll('script, style').forEach((el) => el.remove());
  const text = (el) => (el.textContent || '').trim();
  return {
    title: document.title || '',
    headings: Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6')).map(text),
    paragraphs: Array.from(document.querySelectorAll('p')).map(text),
    links: Array.from(document.querySelectorAll('a')).map((a) => ({ text: text(a), href: a.href || '' })),
    forms: Array.from(document.querySelectorAll('form')).map((form) => ({
      inputs: Array.from(form.querySelectorAll('input, textarea, select')).map((input) => ({
        type: input.getAttribute('type') || input.tagName.toLowerCase(),
        placeholder: input.getAttribute('placeholder') || '',
        name: input.getAttribute('name') || '',
      })),
    })),
  };
}
"""


def _playwright_render(url: str, timeout: float) -> Dict[str, Any]:
    timeout_ms = timeout * 1000
    with sync_playwright() as playwright:
        try:
            browser = playwright.chromium.launch(headless=True)
        except PlaywrightError as exc:
            raise FetchError(f"Unable to launch headless browser: {exc}") from exc
        try:
            page = browser.new_page()
            page.set_default_timeout(timeout_ms)
            page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            return page.evaluate(EXTRACT_SCRIPT)
        except PlaywrightTimeoutError as exc:
            raise RenderTimeout(f"Page {url} did not settle within {timeout:g}s") from exc
        except PlaywrightError as exc:
            raise FetchError(f"Failed to render {url}: {exc}") from exc
        finally:
            browser.close()


class PageExtractor:
    """Renders a single URL and reduces it to a bounded digest."""

    def __init__(
        self,
        *,
        max_paragraphs: int = 10,
        min_paragraph_chars: int = 20,
        render_timeout: float = 30.0,
        render_backend: RenderBackend | None = None,
    ) -> None:
        self.max_paragraphs = max_paragraphs
        self.min_paragraph_chars = min_paragraph_chars
        self.render_timeout = render_timeout
        self._render = render_backend or _playwright_render
        self.logger = get_logger("extractors.page")

    def extract(self, url: str) -> PageDigest:
        self.logger.info("Rendering page %s", url)
        payload = self._render(url, self.render_timeout)
        if not isinstance(payload, dict):
            raise FetchError(f"Render backend returned no document data for {url}")
        return self.build_digest(url, payload)

    def build_digest(self, url: str, payload: Dict[str, Any]) -> PageDigest:
        """Apply the paragraph filter and caps to a raw render payload."""
        headings = [heading for heading in _clean_texts(payload.get("headings")) if heading]
        paragraphs = [
            text
            for text in _clean_texts(payload.get("paragraphs"))
            if len(text) > self.min_paragraph_chars
        ][: self.max_paragraphs]

        links: List[LinkDescriptor] = []
        for raw in _as_list(payload.get("links")):
            if isinstance(raw, dict):
                links.append(
                    LinkDescriptor(text=_clean(raw.get("text")), href=_clean(raw.get("href")))
                )

        forms: List[FormDescriptor] = []
        for raw_form in _as_list(payload.get("forms")):
            if not isinstance(raw_form, dict):
                continue
            fields = [
                FieldDescriptor(
                    type=_clean(raw.get("type")) or "input",
                    placeholder=_clean(raw.get("placeholder")),
                    name=_clean(raw.get("name")),
                )
                for raw in _as_list(raw_form.get("inputs"))
                if isinstance(raw, dict)
            ]
            forms.append(FormDescriptor(fields=fields))

        return PageDigest(
            url=url,
            title=_clean(payload.get("title")),
            headings=headings,
            paragraphs=paragraphs,
            links=links,
            forms=forms,
        )


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _clean_texts(value: Any) -> List[str]:
    return [_clean(item) for item in _as_list(value)]


__all__ = ["EXTRACT_SCRIPT", "PageExtractor"]
