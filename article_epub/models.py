"""Data models used throughout the export pipeline."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import ConversionCancelled


@dataclass(frozen=True)
class Article:
    """Article to export: title, source URL and HTML body."""

    title: str
    url: str
    html: str


@dataclass
class ResolvedAsset:
    """Downloaded resource ready to be bundled in the package."""

    name: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class RewriteOutcome:
    """Result of processing one resource-bearing element.

    ``local_name`` is set when the element was rewritten; otherwise
    ``reason`` says why it was skipped.
    """

    reference: str
    url: Optional[str] = None
    local_name: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def rewritten(cls, reference: str, url: str, local_name: str) -> "RewriteOutcome":
        return cls(reference=reference, url=url, local_name=local_name)

    @classmethod
    def skipped(
        cls, reference: str, reason: str, url: Optional[str] = None
    ) -> "RewriteOutcome":
        return cls(reference=reference, url=url, reason=reason)

    @property
    def is_rewritten(self) -> bool:
        return self.local_name is not None


@dataclass
class PackagedDocument:
    """Finished export: package bytes, content type and display name."""

    data: bytes
    content_type: str
    name: str
    skipped: Tuple[RewriteOutcome, ...] = field(default_factory=tuple)


class CancelToken:
    """Cooperative cancellation signal shared between caller and fetcher."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise ConversionCancelled("export cancelled")
