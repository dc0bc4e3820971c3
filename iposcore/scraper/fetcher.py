import requests
import json
from pathlib import Path
from datetime import datetime
from typing import Callable, Optional

from iposcore.core.config import settings
from iposcore.core.errors import SourceFetchError
from iposcore.core.logging_config import get_logger
from iposcore.utils.helpers import slugify_url

logger = get_logger(__name__)

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-IN,en;q=0.9",
    "Referer": "https://www.google.com/",
}

Fetch = Callable[[str], str]


def get_html_file_path(url: str, cache_dir: Optional[str] = None) -> Path:
    """Get the cache file path for a given URL."""
    return Path(cache_dir or settings.HTML_CACHE_DIR) / f"{slugify_url(url)}.html"


def get_metadata_file_path(url: str, cache_dir: Optional[str] = None) -> Path:
    """Get the metadata file path for a given URL."""
    return Path(cache_dir or settings.HTML_CACHE_DIR) / f"{slugify_url(url)}.json"


def save_html(url: str, html: str, metadata: Optional[dict] = None, cache_dir: Optional[str] = None) -> Path:
    """Save HTML content to file with optional metadata"""
    file_path = get_html_file_path(url, cache_dir)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(html, encoding="utf-8")

    if metadata:
        metadata_path = get_metadata_file_path(url, cache_dir)
        metadata["saved_at"] = datetime.now().isoformat()
        metadata["url"] = url
        metadata_path.write_text(json.dumps(metadata, indent=2), encoding="utf-8")

    return file_path


def load_html(url: str, cache_dir: Optional[str] = None) -> Optional[str]:
    """Load HTML from saved file if it exists"""
    file_path = get_html_file_path(url, cache_dir)
    if file_path.exists():
        return file_path.read_text(encoding="utf-8")
    return None


def download_html(url: str, use_cache: Optional[bool] = None, timeout: Optional[float] = None) -> str:
    """
    Download HTML from URL.

    Args:
        url: URL to download
        use_cache: Serve from / write to the HTML cache (defaults to settings.USE_HTML_CACHE)
        timeout: Per-request timeout in seconds (defaults to settings.REQUEST_TIMEOUT)

    Returns:
        HTML content as string

    Raises:
        SourceFetchError: on any transport error, timeout or non-2xx status
    """
    if use_cache is None:
        use_cache = settings.USE_HTML_CACHE

    if use_cache:
        cached_html = load_html(url)
        if cached_html:
            logger.debug("Serving %s from HTML cache", url)
            return cached_html

    try:
        response = requests.get(url, headers=HEADERS, timeout=timeout or settings.REQUEST_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceFetchError(url, str(e)) from e
    html = response.text

    if use_cache:
        metadata = {
            "content_length": len(html),
            "status_code": response.status_code,
            "content_type": response.headers.get("Content-Type", ""),
        }
        save_html(url, html, metadata)
    return html


def get_fetcher(backend: Optional[str] = None) -> Fetch:
    """Return the fetch function for the configured backend ("requests" or "browser")."""
    backend = (backend or settings.FETCH_BACKEND).lower()
    if backend == "browser":
        from iposcore.scraper.browser import get_html
        return get_html
    if backend == "requests":
        return download_html
    raise ValueError(f"Unknown fetch backend: {backend}")
