"""Loading of articles from the web."""

from __future__ import annotations

import logging
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests
from playwright.async_api import async_playwright

from .config import ExportConfig
from .content import extract_content
from .models import Article

logger = logging.getLogger("article_epub")


async def render_page(url: str, config: ExportConfig) -> Tuple[str, str]:
    """Navigate to a URL using Playwright and return the HTML and final URL."""
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=True)
        page = await browser.new_page()
        page.set_default_navigation_timeout(config.navigation_timeout * 1000)
        try:
            logger.info("Rendering %s", url)
            await page.goto(url, wait_until="networkidle")
            if config.wait_after_load:
                await page.wait_for_timeout(int(config.wait_after_load * 1000))
            html = await page.content()
            final_url = page.url
        finally:
            await browser.close()
    return html, final_url


def download_page(
    url: str, config: ExportConfig, session: Optional[requests.Session] = None
) -> Tuple[str, str]:
    """Fetch a URL over HTTP and return the HTML and final URL."""
    session = session or requests.Session()
    logger.info("Loading %s", url)
    resp = session.get(
        url,
        timeout=config.navigation_timeout,
        headers={"User-Agent": config.user_agent},
    )
    resp.raise_for_status()
    return resp.text, resp.url


def build_article(html: str, final_url: str, config: ExportConfig) -> Article:
    """Turn a full page into an article with absolute image URLs."""
    title, content_html = extract_content(html, final_url, config)
    if not title:
        title = urlparse(final_url).netloc or "Article"
    return Article(title=title, url=final_url, html=content_html)


async def load_article(url: str, config: ExportConfig) -> Article:
    """Load ``url`` (rendered with Playwright when configured) as an article."""
    if config.render:
        html, final_url = await render_page(url, config)
    else:
        html, final_url = download_page(url, config)
    return build_article(html, final_url, config)
