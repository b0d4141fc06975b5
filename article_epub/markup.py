"""Thin wrapper around BeautifulSoup for parsing and serializing documents."""

from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .errors import MarkupError

PARSER = "html.parser"


def parse_document(data: bytes) -> BeautifulSoup:
    try:
        return BeautifulSoup(data, PARSER, from_encoding="utf-8")
    except Exception as exc:  # noqa: BLE001 - parser errors have no common base
        raise MarkupError(f"failed to parse HTML: {exc}") from exc


def serialize_document(soup: BeautifulSoup) -> bytes:
    try:
        return soup.decode(formatter="minimal").encode("utf-8")
    except Exception as exc:  # noqa: BLE001 - see parse_document
        raise MarkupError(f"failed to serialize HTML: {exc}") from exc


def elements_by_tag(soup: BeautifulSoup, name: str) -> List[Tag]:
    """Return every element named ``name``, in document order."""
    return soup.find_all(name)


def has_attribute(element: Tag, name: str) -> bool:
    return element.has_attr(name)


def get_attribute(element: Tag, name: str) -> Optional[str]:
    value = element.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def set_attribute(element: Tag, name: str, value: str) -> None:
    element[name] = value
