"""EPUB container writer.

Entries are streamed into a zip archive in the order they are created:
``mimetype`` (stored, uncompressed) and ``META-INF/container.xml`` first,
then resources and documents, then the navigation document and the
package descriptor written by :meth:`EpubWriter.write_opf`.
"""

from __future__ import annotations

import datetime as dt
import logging
import uuid
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, BinaryIO, Iterable, Iterator, List, Optional, Set
from xml.sax.saxutils import escape, quoteattr

from .errors import PackageError

logger = logging.getLogger("article_epub")

EPUB_MIMETYPE = "application/epub+zip"
XHTML_MIMETYPE = "application/xhtml+xml"
MIMETYPE_PATH = "mimetype"
CONTAINER_PATH = "META-INF/container.xml"
OPF_PATH = "content.opf"
NAV_PATH = "nav.xhtml"
FIXED_PATHS = frozenset({MIMETYPE_PATH, CONTAINER_PATH, OPF_PATH, NAV_PATH})
FIXED_DIRS = frozenset(path.split("/", 1)[0] for path in FIXED_PATHS if "/" in path)

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path={path} media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

NAV_XHTML = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops" lang={lang} xml:lang={lang}>
<head>
  <title>{title}</title>
</head>
<body>
  <nav epub:type="toc" id="toc">
    <ol>
      <li><a href={href}>{title}</a></li>
    </ol>
  </nav>
</body>
</html>
"""

OPF_XML = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="bookid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:identifier id="bookid">{identifier}</dc:identifier>
    <dc:title>{title}</dc:title>
    <dc:language>{language}</dc:language>
{source}    <meta property="dcterms:modified">{modified}</meta>
  </metadata>
  <manifest>
{manifest}
  </manifest>
  <spine>
    <itemref idref={primary_id}/>
  </spine>
</package>
"""


@dataclass
class ManifestItem:
    """Entry listed in the package descriptor."""

    id: str
    href: str
    media_type: str
    properties: Optional[str] = None

    def to_xml(self) -> str:
        attrs = (
            f"id={quoteattr(self.id)} href={quoteattr(self.href)} "
            f"media-type={quoteattr(self.media_type)}"
        )
        if self.properties:
            attrs += f" properties={quoteattr(self.properties)}"
        return f"    <item {attrs}/>"


class EpubWriter:
    """Write an EPUB 3 package into a binary stream."""

    def __init__(
        self,
        output: BinaryIO,
        title: str,
        *,
        language: str = "en",
        source_url: Optional[str] = None,
        identifier: Optional[str] = None,
        reserved: Iterable[str] = (),
    ) -> None:
        self.title = title
        self.language = language
        self.source_url = source_url
        self.identifier = identifier or f"urn:uuid:{uuid.uuid4()}"
        self._zip = zipfile.ZipFile(output, "w", compression=zipfile.ZIP_DEFLATED)
        self._items: List[ManifestItem] = []
        self._names: Set[str] = set()
        self._reserved = frozenset(reserved)
        self._container_written = False
        self._finalized = False
        self._open_item: Optional[str] = None

    @property
    def items(self) -> List[ManifestItem]:
        return list(self._items)

    def has_entry(self, name: str) -> bool:
        """Whether ``name`` is taken, written or reserved for a later entry."""
        return self._is_taken(name) or name in self._reserved

    def _is_taken(self, name: str) -> bool:
        return name in self._names or name in FIXED_PATHS or name in FIXED_DIRS

    def _writestr(self, info: zipfile.ZipInfo, data: str) -> None:
        try:
            self._zip.writestr(info, data.encode("utf-8"))
        except (OSError, ValueError, zipfile.BadZipFile) as exc:
            raise PackageError(f"failed to write {info.filename}: {exc}") from exc
        self._names.add(info.filename)

    def _zipinfo(self, name: str, compress_type: int = zipfile.ZIP_DEFLATED) -> zipfile.ZipInfo:
        info = zipfile.ZipInfo(name, date_time=dt.datetime.now().timetuple()[:6])
        info.compress_type = compress_type
        return info

    def new_container(self) -> None:
        """Write the ``mimetype`` marker and ``META-INF/container.xml``."""
        if self._container_written:
            raise PackageError("container already initialised")
        self._writestr(self._zipinfo(MIMETYPE_PATH, zipfile.ZIP_STORED), EPUB_MIMETYPE)
        self._writestr(self._zipinfo(CONTAINER_PATH), CONTAINER_XML.format(path=quoteattr(OPF_PATH)))
        self._container_written = True

    @contextmanager
    def new_item(self, name: str, content_type: str) -> Iterator[IO[bytes]]:
        """Create a manifest entry and yield a writable stream for its content.

        Names must be unique; an existing entry is never overwritten.
        """
        if not self._container_written:
            raise PackageError("container must be initialised before adding items")
        if self._finalized:
            raise PackageError("package descriptor already written")
        if not name or self._is_taken(name):
            raise PackageError(f"entry {name!r} already exists in the package")
        if self._open_item is not None:
            raise PackageError(f"entry {self._open_item!r} is still being written")

        try:
            sink = self._zip.open(self._zipinfo(name), "w")
        except (OSError, ValueError, RuntimeError) as exc:
            raise PackageError(f"failed to create entry {name}: {exc}") from exc
        self._names.add(name)
        self._items.append(
            ManifestItem(id=f"item-{len(self._items) + 1}", href=name, media_type=content_type)
        )
        self._open_item = name
        try:
            with sink:
                yield sink
        except OSError as exc:
            raise PackageError(f"failed to write entry {name}: {exc}") from exc
        finally:
            self._open_item = None

    def _item_for(self, href: str) -> ManifestItem:
        for item in self._items:
            if item.href == href:
                return item
        raise PackageError(f"primary document {href!r} is not part of the package")

    def write_opf(self, primary: str) -> None:
        """Write the navigation document and the package descriptor.

        ``primary`` names the entry used as the package's reading order.
        """
        if not self._container_written:
            raise PackageError("container must be initialised before the descriptor")
        if self._finalized:
            raise PackageError("package descriptor already written")
        primary_item = self._item_for(primary)

        lang = quoteattr(self.language)
        self._writestr(
            self._zipinfo(NAV_PATH),
            NAV_XHTML.format(lang=lang, title=escape(self.title), href=quoteattr(primary)),
        )
        nav_item = ManifestItem(id="nav", href=NAV_PATH, media_type=XHTML_MIMETYPE, properties="nav")

        source = ""
        if self.source_url:
            source = f"    <dc:source>{escape(self.source_url)}</dc:source>\n"
        modified = (
            dt.datetime.now(dt.timezone.utc)
            .replace(microsecond=0)
            .isoformat()
            .replace("+00:00", "Z")
        )
        manifest = "\n".join(item.to_xml() for item in [*self._items, nav_item])
        self._writestr(
            self._zipinfo(OPF_PATH),
            OPF_XML.format(
                identifier=escape(self.identifier),
                title=escape(self.title),
                language=escape(self.language),
                source=source,
                modified=modified,
                manifest=manifest,
                primary_id=quoteattr(primary_item.id),
            ),
        )
        self._finalized = True
        logger.debug("Wrote package descriptor with %d item(s)", len(self._items) + 1)

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "EpubWriter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
