"""
Unit tests for the HTTP resource fetcher.
"""

import threading
from unittest.mock import MagicMock

import pytest
import requests
from urllib3.exceptions import LocationParseError

from article_epub.config import ExportConfig
from article_epub.errors import ConversionCancelled, FetchError
from article_epub.fetcher import HttpFetcher, infer_image_extension, suggest_name
from article_epub.models import CancelToken

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
GIF_BYTES = b"GIF89a" + b"\x00" * 32


def make_session(chunks, content_type="image/png", status_error=None):
    resp = MagicMock()
    resp.headers = {"Content-Type": content_type}
    resp.iter_content.return_value = list(chunks)
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    session = MagicMock()
    session.headers = {}
    session.get.return_value.__enter__.return_value = resp
    return session


class TestHttpFetcher:
    """Tests for download, validation and naming."""

    def test_fetches_image(self):
        session = make_session([PNG_BYTES[:8], PNG_BYTES[8:]])
        fetcher = HttpFetcher(ExportConfig(fetch_timeout=5), session=session)

        asset = fetcher.fetch(CancelToken(), "https://cdn.x/img/a.png?w=200")

        assert asset.name == "a.png"
        assert asset.content_type == "image/png"
        assert asset.data == PNG_BYTES
        session.get.assert_called_once_with(
            "https://cdn.x/img/a.png?w=200", timeout=5, stream=True
        )

    def test_sniffed_type_wins_over_header(self):
        session = make_session([GIF_BYTES], content_type="application/octet-stream")
        asset = HttpFetcher(session=session).fetch(CancelToken(), "https://cdn.x/pic")
        assert asset.content_type == "image/gif"
        assert asset.name == "pic.gif"

    def test_declared_image_type_is_accepted(self):
        svg = b'<svg xmlns="http://www.w3.org/2000/svg"/>'
        session = make_session([svg], content_type="image/svg+xml; charset=utf-8")
        asset = HttpFetcher(session=session).fetch(CancelToken(), "https://cdn.x/logo")
        assert asset.content_type == "image/svg+xml"
        assert asset.name == "logo.svg"

    def test_non_image_is_rejected(self):
        session = make_session([b"<html>not an image</html>"], content_type="text/html")
        with pytest.raises(FetchError) as excinfo:
            HttpFetcher(session=session).fetch(CancelToken(), "https://cdn.x/page")
        assert "unsupported content type" in excinfo.value.reason

    def test_empty_body_is_rejected(self):
        session = make_session([])
        with pytest.raises(FetchError):
            HttpFetcher(session=session).fetch(CancelToken(), "https://cdn.x/a.png")

    def test_oversized_body_is_rejected(self):
        session = make_session([PNG_BYTES, PNG_BYTES])
        fetcher = HttpFetcher(ExportConfig(max_asset_bytes=len(PNG_BYTES)), session=session)
        with pytest.raises(FetchError):
            fetcher.fetch(CancelToken(), "https://cdn.x/a.png")

    def test_http_error_becomes_fetch_error(self):
        session = make_session([PNG_BYTES], status_error=requests.HTTPError("404"))
        with pytest.raises(FetchError) as excinfo:
            HttpFetcher(session=session).fetch(CancelToken(), "https://cdn.x/a.png")
        assert excinfo.value.url == "https://cdn.x/a.png"

    @pytest.mark.parametrize(
        "error",
        [
            LocationParseError("a" * 70 + ".com"),
            ValueError("bad url"),
            UnicodeError("label too long"),
        ],
    )
    def test_url_errors_become_fetch_error(self, error):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = error
        with pytest.raises(FetchError):
            HttpFetcher(session=session).fetch(CancelToken(), "https://cdn.x/a.png")

    def test_connection_error_becomes_fetch_error(self):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(FetchError):
            HttpFetcher(session=session).fetch(CancelToken(), "https://cdn.x/a.png")

    def test_cancelled_token_prevents_request(self):
        session = make_session([PNG_BYTES])
        token = CancelToken()
        token.cancel()
        with pytest.raises(ConversionCancelled):
            HttpFetcher(session=session).fetch(token, "https://cdn.x/a.png")
        session.get.assert_not_called()

    def test_cancellation_aborts_download(self):
        token = CancelToken()

        def chunks():
            yield PNG_BYTES[:8]
            token.cancel()
            yield PNG_BYTES[8:]

        session = make_session([])
        resp = session.get.return_value.__enter__.return_value
        resp.iter_content.return_value = chunks()

        with pytest.raises(ConversionCancelled):
            HttpFetcher(session=session).fetch(token, "https://cdn.x/a.png")

    def test_user_agent_is_set(self):
        session = make_session([PNG_BYTES])
        HttpFetcher(ExportConfig(user_agent="agent/1.0"), session=session)
        assert session.headers["User-Agent"] == "agent/1.0"

    def test_user_agent_replaces_requests_default(self):
        fetcher = HttpFetcher(ExportConfig(user_agent="custom-agent/1"))
        assert fetcher.session.headers["User-Agent"] == "custom-agent/1"

    def test_each_thread_gets_its_own_session(self):
        fetcher = HttpFetcher()
        sessions = []
        worker = threading.Thread(target=lambda: sessions.append(fetcher.session))
        worker.start()
        worker.join()

        assert fetcher.session is fetcher.session
        assert sessions[0] is not fetcher.session

    def test_explicit_session_is_reused(self):
        session = make_session([PNG_BYTES])
        fetcher = HttpFetcher(session=session)
        assert fetcher.session is session


class TestNaming:
    """Tests for extension and name inference."""

    def test_infer_extension_from_header(self):
        assert infer_image_extension("image/jpeg", b"") == "jpg"
        assert infer_image_extension("image/webp; q=1", b"") == "webp"
        assert infer_image_extension("text/html", b"") is None
        assert infer_image_extension(None, b"") is None

    def test_suggest_name_keeps_existing_extension(self):
        assert suggest_name("https://cdn.x/a/b/photo.jpeg", "image/png", PNG_BYTES) == "photo.jpeg"

    def test_suggest_name_unquotes_path(self):
        assert suggest_name("https://cdn.x/my%20pic.png", "image/png", PNG_BYTES) == "my pic.png"

    def test_suggest_name_without_path(self):
        assert suggest_name("https://cdn.x/", "image/png", PNG_BYTES) == "image.png"
