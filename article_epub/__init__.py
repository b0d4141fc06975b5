"""Export web articles as EPUB packages with their images bundled."""

from .errors import ExportError
from .models import Article, CancelToken, PackagedDocument
from .transcoder import EpubExporter

__all__ = ["Article", "CancelToken", "EpubExporter", "ExportError", "PackagedDocument"]
