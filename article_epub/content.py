"""HTML extraction of the readable article body."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from readability import Document

from .config import ExportConfig

_MIN_PLAINTEXT_CHARS = 200
_LAZY_SRC_ATTRIBUTES = ("data-src", "data-original", "data-lazy-src")


def _clean_content(soup: BeautifulSoup, strip_chrome: bool = False) -> BeautifulSoup:
    """Remove noisy tags while keeping relevant article markup."""
    for tag in soup(["script", "style", "noscript", "form", "iframe"]):
        tag.decompose()
    if strip_chrome:
        for tag in soup(["header", "footer", "nav", "aside"]):
            tag.decompose()
    return soup


def _plain_text_length(soup: BeautifulSoup) -> int:
    return sum(len(s) for s in soup.stripped_strings)


def _iter_primary_candidates(soup_full: BeautifulSoup) -> Iterable[BeautifulSoup]:
    """Yield progressively broader content scopes to fall back on."""
    for selector in ("main", "article"):
        candidate = soup_full.select_one(selector)
        if candidate:
            yield BeautifulSoup(str(candidate), "html.parser")
    if soup_full.body:
        yield BeautifulSoup(str(soup_full.body), "html.parser")


def absolutize_images(soup: BeautifulSoup, page_url: str) -> None:
    """Resolve image sources against the page URL, promoting lazy-load sources."""
    for img in soup.find_all("img"):
        src = (img.get("src") or "").strip()
        if not src or src.startswith("data:"):
            lazy = next(
                (img.get(attr) for attr in _LAZY_SRC_ATTRIBUTES if img.get(attr)),
                None,
            )
            if lazy:
                src = lazy.strip()
        if not src or src.startswith(("data:", "#")):
            continue
        img["src"] = urljoin(page_url, src)


def extract_content(
    html: str, final_url: str, config: ExportConfig
) -> Tuple[Optional[str], str]:
    """Extract the article title and readable body HTML from a full page."""
    document = Document(html)
    soup_full = BeautifulSoup(html, "html.parser")

    summary_html = document.summary(html_partial=True)
    summary = _clean_content(BeautifulSoup(summary_html, "html.parser"))

    text_length = _plain_text_length(summary)
    full_has_images = bool(soup_full.find("img"))
    summary_has_images = bool(summary.find("img"))

    if text_length < _MIN_PLAINTEXT_CHARS or (full_has_images and not summary_has_images):
        for candidate in _iter_primary_candidates(soup_full):
            candidate = _clean_content(candidate, strip_chrome=True)
            if _plain_text_length(candidate) >= _MIN_PLAINTEXT_CHARS or (
                full_has_images and candidate.find("img")
            ):
                summary = candidate
                break

    absolutize_images(summary, final_url)

    content_html = summary.decode()
    if len(content_html) > config.max_html_chars:
        content_html = content_html[: config.max_html_chars] + "\n<!-- truncated -->"

    title = document.short_title()
    if not title and soup_full.title and soup_full.title.string:
        title = soup_full.title.string.strip()
    return title or None, content_html
