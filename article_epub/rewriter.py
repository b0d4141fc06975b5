"""Download embedded resources and point the document at bundled copies."""

from __future__ import annotations

import logging
import posixpath
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .epub import EpubWriter
from .errors import ConversionCancelled, FetchError
from .fetcher import Fetcher, infer_image_extension
from .markup import elements_by_tag, get_attribute, has_attribute, set_attribute
from .models import CancelToken, RewriteOutcome
from .urls import resolve_reference
from .utils import safe_entry_name

logger = logging.getLogger("article_epub")

RESOURCE_TAG = "img"
RESOURCE_ATTRIBUTE = "src"
FALLBACK_STEM = "image"


def local_entry_name(writer: EpubWriter, suggested: str, content_type: str) -> str:
    """Derive a package-unique entry name from a suggested file name.

    Only the last path component is kept. Clashes with existing entries
    get a numeric suffix before the extension.
    """
    base = safe_entry_name(posixpath.basename(suggested or ""))
    stem, ext = posixpath.splitext(base)
    if not stem:
        stem = FALLBACK_STEM
        if not ext:
            guessed = infer_image_extension(content_type, b"")
            ext = f".{guessed}" if guessed else ""

    candidate = stem + ext
    counter = 2
    while writer.has_entry(candidate):
        candidate = f"{stem}-{counter}{ext}"
        counter += 1
    return candidate


def process_element(
    element: Tag,
    base_url: str,
    fetcher: Fetcher,
    writer: EpubWriter,
    token: CancelToken,
    attr_name: str = RESOURCE_ATTRIBUTE,
) -> Optional[RewriteOutcome]:
    """Fetch the resource referenced by one element and rewrite its attribute.

    Returns None when the element has no such attribute. Skipped
    references and failed downloads leave the attribute untouched and
    add nothing to the package. Package errors and cancellation propagate.
    """
    if not has_attribute(element, attr_name):
        return None

    reference = get_attribute(element, attr_name) or ""
    url = resolve_reference(reference, base_url)
    if url is None:
        return RewriteOutcome.skipped(reference, "unsupported reference")

    token.raise_if_cancelled()
    try:
        asset = fetcher.fetch(token, url)
    except ConversionCancelled:
        raise
    except FetchError as exc:
        logger.warning("Failed to fetch resource %s: %s", url, exc.reason)
        return RewriteOutcome.skipped(reference, exc.reason, url=url)
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Failed to fetch resource %s: %s", url, exc)
        return RewriteOutcome.skipped(reference, str(exc) or type(exc).__name__, url=url)

    local_name = local_entry_name(writer, asset.name, asset.content_type)
    with writer.new_item(local_name, asset.content_type) as sink:
        sink.write(asset.data)
    set_attribute(element, attr_name, local_name)
    logger.debug("Bundled %s as %s (%d bytes)", url, local_name, len(asset.data))
    return RewriteOutcome.rewritten(reference, url, local_name)


def rewrite_resources(
    soup: BeautifulSoup,
    base_url: str,
    fetcher: Fetcher,
    writer: EpubWriter,
    token: CancelToken,
) -> List[RewriteOutcome]:
    """Process every resource-bearing element in document order."""
    outcomes: List[RewriteOutcome] = []
    for element in elements_by_tag(soup, RESOURCE_TAG):
        outcome = process_element(element, base_url, fetcher, writer, token)
        if outcome is not None:
            outcomes.append(outcome)
    return outcomes
