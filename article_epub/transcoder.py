"""High-level orchestration turning an article into an EPUB package."""

from __future__ import annotations

import io
import logging
import time
from typing import List, Optional

from .config import ExportConfig
from .epub import EPUB_MIMETYPE, XHTML_MIMETYPE, EpubWriter
from .fetcher import Fetcher
from .markup import parse_document, serialize_document
from .models import Article, CancelToken, PackagedDocument, RewriteOutcome
from .rewriter import rewrite_resources
from .template import render_article
from .urls import validate_base_url
from .utils import display_name

logger = logging.getLogger("article_epub")

ARTICLE_PATH = "article.xhtml"


def transcode(
    article: Article,
    writer: EpubWriter,
    fetcher: Fetcher,
    token: CancelToken,
    language: str = "en",
) -> List[RewriteOutcome]:
    """Run the render, parse, rewrite and serialize stages into ``writer``.

    Each stage runs once, in order; the first failure propagates.
    """
    rendered = render_article(article, language=language)
    base_url = validate_base_url(article.url)
    writer.new_container()

    soup = parse_document(rendered)
    outcomes = rewrite_resources(soup, base_url, fetcher, writer, token)

    document = serialize_document(soup)
    with writer.new_item(ARTICLE_PATH, XHTML_MIMETYPE) as sink:
        sink.write(document)
    writer.write_opf(ARTICLE_PATH)
    return outcomes


class EpubExporter:
    """Convert an article to an EPUB file with its images bundled."""

    format = "epub"
    content_type = EPUB_MIMETYPE
    extension = ".epub"

    def __init__(self, fetcher: Fetcher, config: Optional[ExportConfig] = None) -> None:
        self.fetcher = fetcher
        self.config = config or ExportConfig()

    def export(
        self, article: Article, token: Optional[CancelToken] = None
    ) -> PackagedDocument:
        token = token or CancelToken()
        start = time.perf_counter()
        buffer = io.BytesIO()
        writer = EpubWriter(
            buffer,
            article.title if isinstance(article.title, str) else "",
            language=self.config.language,
            source_url=article.url,
            reserved=(ARTICLE_PATH,),
        )
        try:
            outcomes = transcode(
                article, writer, self.fetcher, token, language=self.config.language
            )
        finally:
            writer.close()

        skipped = tuple(outcome for outcome in outcomes if not outcome.is_rewritten)
        bundled = len(outcomes) - len(skipped)
        logger.info(
            "Exported %s (%d resource(s) bundled, %d skipped) in %.2fs",
            article.url,
            bundled,
            len(skipped),
            time.perf_counter() - start,
        )
        for outcome in skipped:
            logger.debug("Skipped %r: %s", outcome.reference, outcome.reason)

        return PackagedDocument(
            data=buffer.getvalue(),
            content_type=self.content_type,
            name=display_name(article.title, self.extension),
            skipped=skipped,
        )
