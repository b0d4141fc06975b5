import io
import sys
import zipfile
from pathlib import Path

import pytest

# Add the repository root to sys.path so we can import article_epub
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from article_epub.errors import FetchError  # noqa: E402
from article_epub.models import Article, ResolvedAsset  # noqa: E402


class FakeFetcher:
    """Fetcher returning canned assets and recording every requested URL."""

    def __init__(self, assets=None):
        self.assets = dict(assets or {})
        self.calls = []

    def fetch(self, token, url):
        self.calls.append(url)
        token.raise_if_cancelled()
        result = self.assets.get(url)
        if result is None:
            raise FetchError(url, "404 Not Found")
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def make_fetcher():
    """Build a FakeFetcher from a url -> asset mapping."""
    return FakeFetcher


@pytest.fixture
def png_asset():
    return ResolvedAsset(name="a.png", content_type="image/png", data=b"AAA")


@pytest.fixture
def sample_article():
    return Article(
        title="My Article",
        url="https://example.com/posts/1",
        html=(
            '<p>Intro</p>'
            '<img src="https://cdn.x/a.png" alt="first"/>'
            '<img src="#thumb" alt="second"/>'
        ),
    )


@pytest.fixture
def read_package():
    """Return (ordered entry names, name -> bytes) for packaged EPUB bytes."""

    def _read(data):
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = archive.namelist()
            return names, {name: archive.read(name) for name in names}

    return _read
