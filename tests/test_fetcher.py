import pytest
import requests

from iposcore.core.config import settings
from iposcore.core.errors import SourceFetchError
from iposcore.scraper import fetcher
from iposcore.scraper.fetcher import download_html, get_fetcher, load_html, save_html

URL = "https://www.chittorgarh.com/report/grey-market-premium-upcoming-ipo-mainboard/104/"


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code
        self.headers = {"Content-Type": "text/html"}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


def test_download_returns_page_text(monkeypatch):
    seen = {}

    def fake_get(url, headers, timeout):
        seen.update(url=url, timeout=timeout, agent=headers["User-Agent"])
        return FakeResponse("<table></table>")

    monkeypatch.setattr(fetcher.requests, "get", fake_get)
    assert download_html(URL, use_cache=False) == "<table></table>"
    assert seen["url"] == URL
    assert seen["timeout"] == settings.REQUEST_TIMEOUT
    assert "Mozilla" in seen["agent"]


def test_transport_errors_become_source_fetch_errors(monkeypatch):
    def fake_get(url, headers, timeout):
        raise requests.ConnectTimeout("timed out")

    monkeypatch.setattr(fetcher.requests, "get", fake_get)
    with pytest.raises(SourceFetchError) as exc:
        download_html(URL, use_cache=False)
    assert exc.value.url == URL


def test_http_errors_become_source_fetch_errors(monkeypatch):
    monkeypatch.setattr(fetcher.requests, "get", lambda url, headers, timeout: FakeResponse("", 503))
    with pytest.raises(SourceFetchError):
        download_html(URL, use_cache=False)


def test_cache_round_trip(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "HTML_CACHE_DIR", str(tmp_path))
    calls = []

    def fake_get(url, headers, timeout):
        calls.append(url)
        return FakeResponse("<p>fresh</p>")

    monkeypatch.setattr(fetcher.requests, "get", fake_get)
    assert download_html(URL, use_cache=True) == "<p>fresh</p>"
    assert download_html(URL, use_cache=True) == "<p>fresh</p>"
    assert len(calls) == 1
    assert list(tmp_path.glob("*.json"))


def test_save_and_load_html(tmp_path):
    save_html(URL, "<html/>", cache_dir=str(tmp_path))
    assert load_html(URL, cache_dir=str(tmp_path)) == "<html/>"
    assert load_html("https://www.chittorgarh.com/other/", cache_dir=str(tmp_path)) is None


def test_get_fetcher():
    assert get_fetcher("requests") is download_html
    with pytest.raises(ValueError):
        get_fetcher("carrier-pigeon")


def test_get_fetcher_browser_backend():
    from iposcore.scraper import browser

    assert get_fetcher("browser") is browser.get_html
    assert get_fetcher("Browser") is browser.get_html
