"""Mapping of export format names to exporter factories.

The mapping is built once by the caller and passed down explicitly.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from .config import ExportConfig
from .errors import UnknownFormatError
from .fetcher import Fetcher
from .transcoder import EpubExporter

ExporterFactory = Callable[[], EpubExporter]


def build_registry(
    fetcher: Fetcher, config: Optional[ExportConfig] = None
) -> Dict[str, ExporterFactory]:
    """Return the available exporters bound to ``fetcher``."""
    return {
        EpubExporter.format: lambda: EpubExporter(fetcher, config),
    }


def get_exporter(registry: Dict[str, ExporterFactory], fmt: str) -> EpubExporter:
    try:
        factory = registry[fmt.lower()]
    except KeyError:
        raise UnknownFormatError(
            f"unknown export format {fmt!r} (available: {', '.join(sorted(registry))})"
        ) from None
    return factory()
