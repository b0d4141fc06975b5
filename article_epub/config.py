"""Configuration objects and constants for the exporter."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; article-epub/0.1)"
DEFAULT_FETCH_TIMEOUT = 15.0
MAX_ASSET_BYTES = 10 * 1024 * 1024
DOWNLOAD_CHUNK_SIZE = 64 * 1024
DEFAULT_LANGUAGE = "en"


@dataclass
class ExportConfig:
    """Settings that control article loading, fetching and packaging."""

    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    max_asset_bytes: int = MAX_ASSET_BYTES
    chunk_size: int = DOWNLOAD_CHUNK_SIZE
    language: str = DEFAULT_LANGUAGE
    render: bool = False
    wait_after_load: float = 1.0
    navigation_timeout: float = 30.0
    max_html_chars: int = 500_000
