"""Utility helpers for string normalization and file naming."""

from __future__ import annotations

import re

UNSAFE_NAME_PATTERN = re.compile(r"[^A-Za-z0-9._-]+")
EPUB_EXTENSION = ".epub"


def safe_entry_name(value: str) -> str:
    """Replace characters that would need escaping inside an OPF href."""
    cleaned = UNSAFE_NAME_PATTERN.sub("-", value).strip("-.")
    return cleaned


def display_name(title: str, extension: str = EPUB_EXTENSION) -> str:
    """Build the download name of a package from the article title."""
    stem = title.rstrip(". ")
    if not stem:
        stem = "article"
    return stem + extension
