"""Validation of article and resource URLs."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import SplitResult, urlsplit

from .errors import InvalidBaseURLError

logger = logging.getLogger("article_epub")

SKIPPED_PREFIXES = ("#", "data:")


def _parse_absolute(value: str) -> Optional[SplitResult]:
    """Parse ``value`` and return it only if it has a scheme and a host."""
    try:
        parts = urlsplit(value)
        hostname = parts.hostname
        # Accessing the port validates it; urlsplit alone does not.
        _ = parts.port
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None
    return parts


def is_absolute_url(value: str) -> bool:
    return _parse_absolute(value) is not None


def validate_base_url(url: str) -> str:
    """Check the article URL once before any resource is processed."""
    if not isinstance(url, str) or not is_absolute_url(url.strip()):
        raise InvalidBaseURLError(str(url))
    return url.strip()


def resolve_reference(reference: str, base: str) -> Optional[str]:
    """Return the absolute URL to fetch for ``reference``, or None to skip it.

    Empty, fragment-only and ``data:`` references are skipped, as is
    anything that is not already an absolute URL with a host. Relative
    references are not joined with ``base``: article bodies are expected
    to carry absolute URLs once loaded.
    """
    candidate = reference.strip()
    if not candidate or candidate.startswith(SKIPPED_PREFIXES):
        logger.debug("Skipping special reference %r (base %s)", reference, base)
        return None
    if _parse_absolute(candidate) is None:
        logger.debug("Skipping non-absolute reference %r (base %s)", reference, base)
        return None
    return candidate
