"""Exception types raised by the export pipeline."""

from __future__ import annotations


class ExportError(Exception):
    """Base class for failures that abort an export."""


class InvalidBaseURLError(ExportError):
    """The article URL is not absolute (missing scheme or host)."""

    def __init__(self, url: str) -> None:
        super().__init__(f'url "{url}" is not valid')
        self.url = url


class TemplateError(ExportError):
    """The article could not be rendered into the XHTML skeleton."""


class MarkupError(ExportError):
    """The rendered markup could not be parsed or serialized."""


class PackageError(ExportError):
    """The EPUB container rejected an operation."""


class ConversionCancelled(ExportError):
    """The caller cancelled the export while it was running."""


class UnknownFormatError(ExportError):
    """No exporter is registered for the requested format."""


class FetchError(Exception):
    """A single resource could not be downloaded.

    Never aborts an export: the rewriter treats it as a skip.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason
