"""Resource download and content-type detection."""

from __future__ import annotations

import logging
import posixpath
import threading
from typing import Optional, Protocol
from urllib.parse import unquote, urlsplit

import requests
from filetype import guess
from urllib3.exceptions import LocationParseError

from .config import ExportConfig
from .errors import FetchError
from .models import CancelToken, ResolvedAsset

logger = logging.getLogger("article_epub")


class Fetcher(Protocol):
    """Anything able to download one absolute URL."""

    def fetch(self, token: CancelToken, url: str) -> ResolvedAsset:
        ...


def detect_content_type(data: bytes) -> Optional[str]:
    """Detect an image MIME type from the file signature."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        return kind.mime
    return None


def infer_image_extension(content_type: Optional[str], data: bytes) -> Optional[str]:
    """Guess an image file extension from the file signature or HTTP metadata."""
    kind = guess(data) if data else None
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    if not content_type:
        return None
    parts = content_type.split(";")[0].split("/")
    if len(parts) == 2 and parts[0] == "image":
        ext = parts[1].strip().lower()
        if ext == "jpeg":
            ext = "jpg"
        if ext == "svg+xml":
            ext = "svg"
        return ext
    return None


def suggest_name(url: str, content_type: Optional[str], data: bytes) -> str:
    """Suggest a file name for a downloaded resource based on its URL path."""
    path = unquote(urlsplit(url).path)
    name = posixpath.basename(path)
    stem, ext = posixpath.splitext(name)
    if ext:
        return name
    guessed = infer_image_extension(content_type, data)
    if guessed:
        return f"{stem or 'image'}.{guessed}"
    return name


class HttpFetcher:
    """Download resources over HTTP with a single attempt per URL.

    Without an explicit ``session`` each thread gets its own
    ``requests.Session``, so one fetcher can serve concurrent exports.
    A session passed in gets the configured User-Agent and must not be
    shared across threads.
    """

    def __init__(
        self,
        config: Optional[ExportConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or ExportConfig()
        self._shared_session = session
        self._local = threading.local()
        if session is not None:
            session.headers["User-Agent"] = self.config.user_agent

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = self.config.user_agent
            self._local.session = session
        return session

    def _read_body(self, token: CancelToken, url: str, resp: requests.Response) -> bytes:
        chunks = []
        total = 0
        for chunk in resp.iter_content(chunk_size=self.config.chunk_size):
            token.raise_if_cancelled()
            total += len(chunk)
            if total > self.config.max_asset_bytes:
                raise FetchError(
                    url, f"larger than {self.config.max_asset_bytes} bytes"
                )
            chunks.append(chunk)
        return b"".join(chunks)

    def fetch(self, token: CancelToken, url: str) -> ResolvedAsset:
        token.raise_if_cancelled()
        logger.debug("Fetching %s", url)
        try:
            with self.session.get(
                url, timeout=self.config.fetch_timeout, stream=True
            ) as resp:
                resp.raise_for_status()
                header_type = resp.headers.get("Content-Type", "")
                data = self._read_body(token, url, resp)
        except (requests.RequestException, LocationParseError, ValueError, UnicodeError) as exc:
            raise FetchError(url, str(exc)) from exc

        if not data:
            raise FetchError(url, "empty response")

        content_type = detect_content_type(data)
        if content_type is None:
            declared = header_type.split(";")[0].strip().lower()
            if not declared.startswith("image/"):
                raise FetchError(
                    url, f"unsupported content type (Content-Type={header_type})"
                )
            content_type = declared

        name = suggest_name(url, content_type, data)
        logger.debug("Fetched %s (%d bytes, %s)", url, len(data), content_type)
        return ResolvedAsset(name=name, content_type=content_type, data=data)
